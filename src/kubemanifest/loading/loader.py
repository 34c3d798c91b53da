#!/usr/bin/env python3
"""
KUBEMANIFEST LOADER - The Orchestrator
--------------------------------------
Walks a manifest tree, leaves chart content alone, parses every remaining
YAML file and merges the per-file results into one identity-keyed set.
An identity defined in two files is a load error, never an overwrite.

Author: KubeManifest Team
Date: 2026-10-19
"""

import logging
import os
import threading
from pathlib import Path
from typing import Iterator, Optional

from kubemanifest.core.config import LoadOptions
from kubemanifest.core.errors import DuplicateResourceError, ManifestIOError
from kubemanifest.core.kinds import DEFAULT_KINDS, KindRegistry
from kubemanifest.loading.charts import ChartTracker, PathLike
from kubemanifest.parsing.multidoc import Resources, parse_multidoc

logger = logging.getLogger("kubemanifest.loader")


def _raise(err: OSError):
    raise err


def _io_error(err: OSError, fallback: Path) -> ManifestIOError:
    return ManifestIOError(str(err.filename or fallback), err.strerror or str(err))


class ManifestLoader:
    """
    Loads resources from files and directories below one root.

    The chart tracker for the root is built on the first load and reused by
    every later load through the same loader.
    """

    def __init__(self, root: PathLike, options: Optional[LoadOptions] = None,
                 registry: KindRegistry = DEFAULT_KINDS):
        self.root = Path(os.path.abspath(root))
        self.options = options or LoadOptions()
        self.registry = registry
        self._tracker: Optional[ChartTracker] = None
        self._tracker_lock = threading.Lock()

    @property
    def tracker(self) -> ChartTracker:
        with self._tracker_lock:
            if self._tracker is None:
                self._tracker = ChartTracker(self.root, marker=self.options.chart_marker,
                                             max_depth=self.options.max_depth)
            return self._tracker

    def load(self, *targets: PathLike) -> Resources:
        """
        Loads every target (default: the root) into one mapping.

        Raises:
            ManifestIOError: A target, directory or file cannot be read.
            DecodeError: A document is malformed (unless skip_malformed).
            DuplicateResourceError: An identity is defined twice.
        """
        if not targets:
            targets = (self.root,)

        resources: Resources = {}
        parsed = set()
        for target in targets:
            for file_path in self._discover(self._resolve(target)):
                # Overlapping targets must not report a file against itself
                if file_path in parsed:
                    continue
                parsed.add(file_path)
                self._merge(resources, self._parse_file(file_path))

        logger.info(f"Loaded {len(resources)} resource(s) from {len(parsed)} file(s) under {self.root}")
        return resources

    def _resolve(self, target: PathLike) -> Path:
        path = Path(target)
        if not path.is_absolute():
            path = self.root / path
        return Path(os.path.normpath(path))

    def _source_label(self, file_path: Path) -> str:
        return Path(os.path.relpath(file_path, self.root)).as_posix()

    def _discover(self, path: Path) -> Iterator[Path]:
        """Yields the manifest files a target contributes."""
        tracker = self.tracker
        if tracker.in_chart(path) or self._behind_chart_marker(path):
            logger.debug(f"Skipping chart content: {path}")
            return
        if path.is_dir():
            yield from self._walk(path)
        elif path.is_file():
            # Explicit file targets are trusted regardless of extension
            yield path
        elif path.exists() or path.is_symlink():
            raise ManifestIOError(str(path), "Not a regular file or directory")
        else:
            raise ManifestIOError(str(path), "No such file or directory")

    def _behind_chart_marker(self, path: Path) -> bool:
        """
        Checks the disk for a chart marker in the target or its ancestors up
        to the root. The tracker never follows symlinked directories, so a
        target reached through a link into a chart is only caught here.
        """
        marker = self.options.chart_marker
        candidate = path if path.is_dir() else path.parent
        while True:
            if os.path.isfile(candidate / marker):
                return True
            if candidate == self.root or candidate.parent == candidate:
                return False
            if self.root not in candidate.parents:
                return False
            candidate = candidate.parent

    def _walk(self, top: Path) -> Iterator[Path]:
        tracker = self.tracker
        max_depth = self.options.max_depth
        try:
            for dirpath, dirnames, filenames in os.walk(top, onerror=_raise):
                current = Path(dirpath)

                # Prune chart roots so their templates are never visited
                kept = []
                for name in sorted(dirnames):
                    child = current / name
                    if max_depth is not None and \
                            len(Path(self._source_label(child)).parts) >= max_depth:
                        logger.debug(f"Skipping {child}: deeper than max_depth={max_depth}")
                        continue
                    if tracker.in_chart(child):
                        logger.debug(f"Skipping chart: {child}")
                        continue
                    kept.append(name)
                dirnames[:] = kept

                for name in sorted(filenames):
                    if not self.options.matches(name):
                        continue
                    file_path = current / name
                    if max_depth is not None:
                        rel_parts = Path(self._source_label(file_path)).parts
                        if len(rel_parts) > max_depth:
                            continue
                    if not file_path.is_file():
                        continue
                    yield file_path
        except OSError as e:
            raise _io_error(e, top) from e

    def _parse_file(self, file_path: Path) -> Resources:
        source = self._source_label(file_path)
        try:
            with open(file_path, 'rb') as stream:
                return parse_multidoc(stream, source,
                                      registry=self.registry,
                                      skip_malformed=self.options.skip_malformed)
        except OSError as e:
            raise _io_error(e, file_path) from e

    def _merge(self, into: Resources, found: Resources):
        for rid, resource in found.items():
            existing = into.get(rid)
            if existing is not None:
                raise DuplicateResourceError(rid, existing.source, resource.source)
            into[rid] = resource


def load(root: PathLike, *targets: PathLike, options: Optional[LoadOptions] = None,
         registry: KindRegistry = DEFAULT_KINDS) -> Resources:
    """Loads `targets` (default: the whole root) with a fresh ManifestLoader."""
    return ManifestLoader(root, options=options, registry=registry).load(*targets)
