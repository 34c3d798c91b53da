#!/usr/bin/env python3
"""
KUBEMANIFEST MULTIDOC SUITE
---------------------------
parse_multidoc over whole streams: identity keys, duplicates, empty
documents and malformed-document handling.
"""

import io
import logging

import pytest

from kubemanifest.core.errors import DecodeError, DuplicateResourceError
from kubemanifest.core.kinds import ConfigMap, Deployment
from kubemanifest.core.models import BaseObject, Metadata, ResourceID
from kubemanifest.parsing.multidoc import parse_multidoc

TWO_DEPLOYMENTS = """\
---
kind: Deployment
metadata:
  name: b-deployment
  namespace: b-namespace
---
kind: Deployment
metadata:
  name: a-deployment
"""


def base(source, kind, namespace, name):
    return {"source": source, "kind": kind, "meta": Metadata(namespace=namespace, name=name)}


def test_parse_empty():
    assert parse_multidoc(b"", "test") == {}


def test_parse_some(strip_payload):
    objs = parse_multidoc(TWO_DEPLOYMENTS.encode(), "test")

    obj_a = Deployment(**base("test", "Deployment", "", "a-deployment"))
    obj_b = Deployment(**base("test", "Deployment", "b-namespace", "b-deployment"))
    expected = {obj_a.resource_id(): obj_a, obj_b.resource_id(): obj_b}

    assert len(objs) == 2
    for rid, obj in expected.items():
        assert strip_payload(objs[rid]) == obj


def test_keys_are_canonical_ids():
    objs = parse_multidoc(TWO_DEPLOYMENTS.encode(), "test")
    assert sorted(str(rid) for rid in objs) == [
        "<cluster>:deployment/a-deployment",
        "b-namespace:deployment/b-deployment",
    ]
    for rid in objs:
        assert ResourceID.parse(str(rid)) == rid


def test_raw_payload_matches_each_document():
    objs = parse_multidoc(TWO_DEPLOYMENTS.encode(), "test")
    rid = ResourceID("b-namespace", "Deployment", "b-deployment")
    assert objs[rid].raw == (
        b"kind: Deployment\nmetadata:\n  name: b-deployment\n  namespace: b-namespace\n"
    )


def test_parse_some_with_comment(strip_payload):
    plain = parse_multidoc(TWO_DEPLOYMENTS.encode(), "test")
    commented = parse_multidoc(("# some random comment\n" + TWO_DEPLOYMENTS).encode(), "test")

    assert commented.keys() == plain.keys()
    for rid in plain:
        assert strip_payload(commented[rid]) == strip_payload(plain[rid])


def test_parse_some_long():
    """A ConfigMap carrying over 1 MB of literal text parses whole."""
    buffer = io.StringIO()
    buffer.write("---\nkind: ConfigMap\nmetadata:\n  name: bigmap\ndata:\n  bigdata: |\n")
    line = "    The quick brown fox jumps over the lazy dog.\n"
    while buffer.tell() + len(line) < 1024 * 1024:
        buffer.write(line)
    buffer.write("    ---\n")
    buffer.write(line * 100)

    objs = parse_multidoc(buffer.getvalue().encode(), "test")

    assert len(objs) == 1
    bigmap = objs[ResourceID("", "ConfigMap", "bigmap")]
    assert isinstance(bigmap, ConfigMap)
    assert bigmap.data["bigdata"].endswith(line.strip() + "\n")
    assert "\n---\n" in bigmap.data["bigdata"]
    assert len(bigmap.raw) > 1024 * 1024


def test_trailing_separators_and_empty_documents_are_skipped():
    stream = b"kind: Namespace\nmetadata:\n  name: a\n---\n~\n---\n{}\n---\n"
    objs = parse_multidoc(stream, "test")
    assert list(map(str, objs)) == ["<cluster>:namespace/a"]


def test_unknown_kinds_flow_through():
    objs = parse_multidoc(b"kind: Widget\nmetadata:\n  name: w\n", "test")
    (resource,) = objs.values()
    assert type(resource) is BaseObject
    assert resource.kind == "Widget"


def test_duplicate_in_stream_is_rejected():
    stream = b"kind: Service\nmetadata:\n  name: web\n---\nkind: Service\nmetadata:\n  name: web\n"
    with pytest.raises(DuplicateResourceError) as excinfo:
        parse_multidoc(stream, "services.yaml")

    err = excinfo.value
    assert err.resource_id == ResourceID("", "Service", "web")
    assert err.first == "services.yaml (line 1)"
    assert err.second == "services.yaml (line 5)"
    assert "<cluster>:service/web" in str(err)


def test_kind_case_does_not_split_identity():
    stream = b"kind: Service\nmetadata:\n  name: web\n---\nkind: service\nmetadata:\n  name: web\n"
    with pytest.raises(DuplicateResourceError):
        parse_multidoc(stream, "services.yaml")


def test_malformed_document_aborts_by_default():
    stream = b"kind: Service\nmetadata:\n  name: web\n---\nkind: [broken\n"
    with pytest.raises(DecodeError) as excinfo:
        parse_multidoc(stream, "broken.yaml")
    assert excinfo.value.source == "broken.yaml"
    assert excinfo.value.line >= 5


def test_malformed_document_can_be_skipped(caplog):
    stream = b"kind: Service\nmetadata:\n  name: web\n---\nkind: [broken\n"
    with caplog.at_level(logging.WARNING, logger="kubemanifest.multidoc"):
        objs = parse_multidoc(stream, "broken.yaml", skip_malformed=True)

    assert list(map(str, objs)) == ["<cluster>:service/web"]
    assert "broken.yaml" in caplog.text


def test_source_label_is_applied_to_every_resource():
    objs = parse_multidoc(TWO_DEPLOYMENTS.encode(), "apps/deployments.yaml")
    assert {r.source for r in objs.values()} == {"apps/deployments.yaml"}


def test_accepts_binary_streams():
    objs = parse_multidoc(io.BytesIO(TWO_DEPLOYMENTS.encode()), "test")
    assert len(objs) == 2


def test_accepts_text_streams():
    objs = parse_multidoc(TWO_DEPLOYMENTS, "test")
    assert len(objs) == 2
    assert all(isinstance(r.raw, bytes) for r in objs.values())


def test_kindless_documents_are_skipped():
    stream = b"replicaCount: 1\n---\nkind: Namespace\nmetadata:\n  name: a\n---\nimage:\n  tag: v2\n"
    objs = parse_multidoc(stream, "values.yaml")
    assert list(map(str, objs)) == ["<cluster>:namespace/a"]
    assert parse_multidoc(b"replicaCount: 1\n---\nimage: {tag: v2}\n", "values.yaml") == {}


def test_resource_without_name_aborts():
    with pytest.raises(DecodeError) as excinfo:
        parse_multidoc(b"kind: Namespace\nmetadata:\n  name: a\n---\nkind: Service\n", "svc.yaml")
    assert excinfo.value.line == 5
