#!/usr/bin/env python3
"""
KUBEMANIFEST CHART TRACKER
--------------------------
Finds packaged charts under a load root. A chart is any directory directly
containing the marker file (Chart.yaml); everything beneath a chart root is
template source, not literal manifests, and the loader leaves it alone.

The tree is walked once, when the tracker is built. Afterwards both
classification sets are frozen, so queries never touch the filesystem and
a tracker can be shared freely between threads.

Author: KubeManifest Team
Date: 2026-10-19
"""

import enum
import errno
import logging
import os
from pathlib import Path
from typing import FrozenSet, Optional, Union

from kubemanifest.core.config import CHART_MARKER
from kubemanifest.core.errors import ManifestIOError

logger = logging.getLogger("kubemanifest.charts")

PathLike = Union[str, os.PathLike]


class PathClass(enum.Enum):
    CHART_ROOT = "chart-root"
    IN_CHART = "in-chart"
    ORDINARY = "ordinary"


def _raise(err: OSError):
    raise err


class ChartTracker:
    """
    Classifies paths below `root` as chart roots, chart content or ordinary.

    With `max_depth` set, directories that many levels below the root or
    deeper are not scanned and count as ordinary.

    Raises:
        ManifestIOError: The root is missing, not a directory, or some part
            of the tree could not be read.
    """

    def __init__(self, root: PathLike, marker: str = CHART_MARKER,
                 max_depth: Optional[int] = None):
        self.root = Path(os.path.abspath(root))
        self.marker = marker
        self.max_depth = max_depth

        charts = set()
        non_charts = set()
        try:
            if not self.root.exists():
                raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.root))
            if not self.root.is_dir():
                raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(self.root))
            # Symlinked directories are not followed, so a link cannot loop the walk
            for dirpath, dirnames, filenames in os.walk(self.root, onerror=_raise):
                current = Path(dirpath)
                if marker in filenames:
                    charts.add(current)
                else:
                    non_charts.add(current)
                if max_depth is not None and \
                        len(current.relative_to(self.root).parts) + 1 >= max_depth:
                    dirnames[:] = []
        except OSError as e:
            path = e.filename or self.root
            raise ManifestIOError(str(path), e.strerror or str(e)) from e

        self.chart_roots: FrozenSet[Path] = frozenset(charts)
        self.non_charts: FrozenSet[Path] = frozenset(non_charts)
        logger.debug(
            f"Chart scan of {self.root}: {len(self.chart_roots)} chart(s), "
            f"{len(self.non_charts)} other director(ies)"
        )

    def _normalize(self, path: PathLike) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = self.root / path
        return Path(os.path.normpath(path))

    def is_chart(self, path: PathLike) -> bool:
        """True iff `path` is a directory directly containing the marker."""
        return self._normalize(path) in self.chart_roots

    def in_chart(self, path: PathLike) -> bool:
        """
        True iff `path` or one of its ancestors, up to and including the
        root, is a chart root. Paths outside the root are never in a chart.
        """
        path = self._normalize(path)
        if path != self.root and self.root not in path.parents:
            return False
        for candidate in (path, *path.parents):
            if candidate in self.chart_roots:
                return True
            if candidate == self.root:
                break
        return False

    def classify(self, path: PathLike) -> PathClass:
        if self.is_chart(path):
            return PathClass.CHART_ROOT
        if self.in_chart(path):
            return PathClass.IN_CHART
        return PathClass.ORDINARY
