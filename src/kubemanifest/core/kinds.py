#!/usr/bin/env python3
"""
KUBEMANIFEST KINDS - Variant Registry
-------------------------------------
Concrete representations for the kinds the loader knows about, and the
registry the decoder consults to pick one. Kinds missing from a registry
decode into BaseObject, so an unfamiliar kind never fails a load.

Author: KubeManifest Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Type

from kubemanifest.core.errors import DecodeError
from kubemanifest.core.models import BaseObject


def _mapping_field(doc: dict, key: str, source: str, line: int) -> Dict[str, Any]:
    """Returns doc[key] as a dict, treating a missing or null value as empty."""
    value = doc.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(source, f"'{key}' must be a map/object, got {type(value).__name__}",
                          line=line)
    return value


@dataclass
class Workload(BaseObject):
    """
    A kind whose spec embeds a pod template. The traversal path to the pod
    spec is the only thing that differs between workload kinds.
    """
    spec: Dict[str, Any] = field(default_factory=dict)

    TEMPLATE_PATH = ("template",)

    @classmethod
    def extract_fields(cls, doc: dict, source: str, line: int = 1) -> dict:
        return {"spec": _mapping_field(doc, "spec", source, line)}

    def pod_spec(self) -> Dict[str, Any]:
        node: Any = self.spec
        for key in self.TEMPLATE_PATH + ("spec",):
            node = node.get(key) if isinstance(node, dict) else None
            if node is None:
                return {}
        return node if isinstance(node, dict) else {}

    def containers(self) -> List[Dict[str, Any]]:
        """Container entries of the pod template, init containers excluded."""
        containers = self.pod_spec().get("containers") or []
        return [c for c in containers if isinstance(c, dict)]


@dataclass
class Deployment(Workload):
    pass


@dataclass
class DaemonSet(Workload):
    pass


@dataclass
class StatefulSet(Workload):
    pass


@dataclass
class CronJob(Workload):
    # spec.jobTemplate.spec.template.spec
    TEMPLATE_PATH = ("jobTemplate", "spec", "template")


@dataclass
class ConfigMap(BaseObject):
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def extract_fields(cls, doc: dict, source: str, line: int = 1) -> dict:
        return {"data": _mapping_field(doc, "data", source, line)}


@dataclass
class Namespace(BaseObject):
    """
    Cluster-scoped. Manifests normally omit metadata.namespace; when one is
    written anyway it is kept, and it takes part in the identity as for any
    other kind.
    """


KindRegistry = Mapping[str, Type[BaseObject]]

DEFAULT_KINDS: KindRegistry = MappingProxyType({
    "Deployment": Deployment,
    "DaemonSet": DaemonSet,
    "StatefulSet": StatefulSet,
    "CronJob": CronJob,
    "ConfigMap": ConfigMap,
    "Namespace": Namespace,
})


def make_registry(*extra: Mapping[str, Type[BaseObject]]) -> KindRegistry:
    """Builds an immutable registry from DEFAULT_KINDS plus overrides."""
    merged: Dict[str, Type[BaseObject]] = dict(DEFAULT_KINDS)
    for mapping in extra:
        merged.update(mapping)
    return MappingProxyType(merged)
