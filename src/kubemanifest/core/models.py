#!/usr/bin/env python3
"""
KUBEMANIFEST CORE MODELS
------------------------
Defines the fundamental data structures shared across the loader.
A resource is identified by its (namespace, kind, name) triple and always
carries the exact bytes of the document it was decoded from.

Author: KubeManifest Team
Date: 2026-10-19
"""

import re
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

# Rendering used for resources without a namespace
CLUSTER_SCOPE = "<cluster>"

_ID_PATTERN = re.compile(
    r'^(<cluster>|[a-zA-Z0-9_.\-]+):([a-zA-Z0-9_.\-]+)/([a-zA-Z0-9_.:\-]+)$'
)


@dataclass(frozen=True, order=True)
class ResourceID:
    """
    Canonical identity of a resource.

    Ordering compares namespace, then kind, then name. The kind is stored
    lower-cased so that 'Deployment' and 'deployment' name the same thing.
    Renders as ``<namespace>:<kind>/<name>``; an empty namespace renders
    as ``<cluster>``.
    """
    namespace: str
    kind: str
    name: str

    def __post_init__(self):
        object.__setattr__(self, "kind", self.kind.lower())

    def __str__(self) -> str:
        namespace = self.namespace or CLUSTER_SCOPE
        return f"{namespace}:{self.kind}/{self.name}"

    @classmethod
    def parse(cls, text: str) -> "ResourceID":
        """Inverse of str(); raises ValueError on anything it did not render."""
        match = _ID_PATTERN.match(text)
        if not match:
            raise ValueError(f"Invalid resource ID: {text!r}")
        namespace, kind, name = match.groups()
        if namespace == CLUSTER_SCOPE:
            namespace = ""
        return cls(namespace, kind, name)


@dataclass
class Metadata:
    """The identity-bearing part of a manifest's metadata block."""
    namespace: str = ""
    name: str = ""


@runtime_checkable
class Resource(Protocol):
    """
    Capability set every decoded resource offers to downstream
    reconciliation: identity, raw payload and diagnostics label.
    """
    source: str
    kind: str
    raw: bytes

    @property
    def namespace(self) -> str: ...

    @property
    def name(self) -> str: ...

    def resource_id(self) -> ResourceID: ...


@dataclass
class BaseObject:
    """
    The common shape of every resource, and the fallback variant for kinds
    without a dedicated representation.
    """
    source: str                  # File path or stream label, diagnostics only
    kind: str                    # The discriminant, as written in the manifest
    meta: Metadata = field(default_factory=Metadata)
    raw: bytes = b""             # Exact document bytes, never re-serialised

    @property
    def namespace(self) -> str:
        return self.meta.namespace

    @property
    def name(self) -> str:
        return self.meta.name

    def resource_id(self) -> ResourceID:
        return ResourceID(self.meta.namespace, self.kind, self.meta.name)

    @classmethod
    def extract_fields(cls, doc: dict, source: str, line: int = 1) -> dict:
        """
        Returns the keyword arguments a variant needs beyond the base fields.
        Variants override this; the fallback keeps nothing extra.
        """
        return {}
