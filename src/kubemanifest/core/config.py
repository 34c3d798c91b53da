"""
KUBEMANIFEST CONFIGURATION
--------------------------
Load-time knobs. The loader is configured in code only; reading flags,
environment or files is the job of whatever application embeds it.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_EXTENSIONS: Tuple[str, ...] = (".yaml", ".yml")
CHART_MARKER = "Chart.yaml"


@dataclass(frozen=True)
class LoadOptions:
    """
    Options for a ManifestLoader.

    extensions:     File suffixes considered manifests during a directory walk
                    (compared case-insensitively).
    chart_marker:   File name whose presence makes a directory a chart root.
    max_depth:      Maximum number of path components below the load root a
                    file may have; None walks the whole tree.
    skip_malformed: Log and skip undecodable documents instead of failing.
    """
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    chart_marker: str = CHART_MARKER
    max_depth: Optional[int] = None
    skip_malformed: bool = False

    def matches(self, file_name: str) -> bool:
        lowered = file_name.lower()
        return any(lowered.endswith(ext.lower()) for ext in self.extensions)
