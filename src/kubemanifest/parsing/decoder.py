#!/usr/bin/env python3
"""
KUBEMANIFEST DECODER - Identity Extraction
------------------------------------------
Turns one YAML document into a typed resource. The kind discriminant picks
the concrete representation from an explicit registry; the identity fields
are validated; the original bytes ride along untouched.

Author: KubeManifest Team
Date: 2026-10-19
"""

from typing import Any, Optional

from ruamel.yaml import YAML, YAMLError

from kubemanifest.core.errors import DecodeError
from kubemanifest.core.kinds import DEFAULT_KINDS, KindRegistry
from kubemanifest.core.models import BaseObject, Metadata, Resource


class ResourceDecoder:
    """
    Decodes documents into resources using one registry.

    Holds a ruamel YAML instance, which is not safe to share between
    threads; create one decoder per thread.
    """

    def __init__(self, registry: KindRegistry = DEFAULT_KINDS):
        self.registry = registry
        self.yaml = YAML(typ='safe')

    def _load(self, data: bytes, source: str, start_line: int) -> Any:
        try:
            return self.yaml.load(data)
        except YAMLError as e:
            mark = getattr(e, 'problem_mark', None) or getattr(e, 'context_mark', None)
            problem = getattr(e, 'problem', None) or str(e)
            if mark is not None:
                raise DecodeError(source, problem,
                                  line=start_line + mark.line,
                                  column=mark.column + 1) from e
            raise DecodeError(source, problem, line=start_line) from e

    def _identity_field(self, value: Any, field: str, source: str, line: int) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise DecodeError(
                source, f"'{field}' must be a string, got {type(value).__name__}", line=line
            )
        return value

    def decode(self, data: bytes, source: str, start_line: int = 1) -> Optional[Resource]:
        """
        Returns the resource for one document, or None when the document
        holds nothing (blank, comments only, null or an empty map) or has no
        kind, such as a values file. A kind without a name is an error.
        """
        doc = self._load(data, source, start_line)
        if doc is None or doc == {}:
            return None
        if not isinstance(doc, dict):
            raise DecodeError(
                source, f"Document must be a map/object, got {type(doc).__name__}", line=start_line
            )

        kind = self._identity_field(doc.get("kind"), "kind", source, start_line)
        if not kind:
            return None

        metadata = doc.get("metadata")
        if metadata is None:
            metadata = {}
        elif not isinstance(metadata, dict):
            raise DecodeError(
                source, f"'metadata' must be a map/object, got {type(metadata).__name__}",
                line=start_line
            )
        meta = Metadata(
            namespace=self._identity_field(metadata.get("namespace"), "metadata.namespace",
                                           source, start_line),
            name=self._identity_field(metadata.get("name"), "metadata.name", source, start_line),
        )
        if not meta.name:
            raise DecodeError(source, f"{kind} has no 'metadata.name'", line=start_line)

        # Unknown kinds fall back to the base representation
        variant = self.registry.get(kind, BaseObject)
        extra = variant.extract_fields(doc, source, start_line)
        return variant(source=source, kind=kind, meta=meta, raw=bytes(data), **extra)
