"""
KUBEMANIFEST ERRORS
-------------------
Every failure raised while splitting, decoding or loading manifests derives
from ManifestError and carries the context needed for an actionable report.
"""

from typing import Optional


class ManifestError(Exception):
    """Base class for all loader failures."""


class DecodeError(ManifestError):
    """A document is not well-formed YAML or its identity fields are malformed."""

    def __init__(self, source: str, message: str,
                 line: Optional[int] = None, column: Optional[int] = None):
        self.source = source
        self.message = message
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        location = self.source
        if self.line is not None:
            location += f":L{self.line}"
            if self.column is not None:
                location += f":C{self.column}"
        return f"Decode error in {location}: {self.message}"


class DuplicateResourceError(ManifestError):
    """Two documents resolve to the same ResourceID."""

    def __init__(self, resource_id, first: str, second: str):
        self.resource_id = resource_id
        self.first = first
        self.second = second
        super().__init__(
            f"Duplicate definition of '{resource_id}' (in {first} and {second})"
        )


class ManifestIOError(ManifestError):
    """A file or directory could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to read {path}: {reason}")
