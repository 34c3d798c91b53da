#!/usr/bin/env python3
"""
KUBEMANIFEST MULTIDOC PARSER
----------------------------
Runs the splitter and the decoder over one stream in a strict order and
collects the results by identity. Any identity seen twice in the same
stream is an authoring conflict and aborts the parse.

Author: KubeManifest Team
Date: 2026-10-19
"""

import logging
from typing import Dict

from kubemanifest.core.errors import DecodeError, DuplicateResourceError
from kubemanifest.core.kinds import DEFAULT_KINDS, KindRegistry
from kubemanifest.core.models import Resource, ResourceID
from kubemanifest.parsing.decoder import ResourceDecoder
from kubemanifest.parsing.splitter import DocumentSplitter, Stream

logger = logging.getLogger("kubemanifest.multidoc")

Resources = Dict[ResourceID, Resource]


def parse_multidoc(data: Stream, source: str,
                   registry: KindRegistry = DEFAULT_KINDS,
                   skip_malformed: bool = False) -> Resources:
    """
    Parses every document in `data`, labelling each resource with `source`.

    Args:
        data: The stream, as text, bytes or a binary file object.
        source: Label recorded on every resource and used in errors.
        registry: Kind to variant mapping for the decoder.
        skip_malformed: Log and drop documents that fail to decode instead
            of raising DecodeError.

    Raises:
        DecodeError: A document is malformed and skip_malformed is False.
        DuplicateResourceError: Two documents share a ResourceID.
    """
    decoder = ResourceDecoder(registry)
    resources: Resources = {}
    seen_at: Dict[ResourceID, int] = {}

    for document in DocumentSplitter(data).documents():
        try:
            resource = decoder.decode(document.data, source, start_line=document.start_line)
        except DecodeError as e:
            if not skip_malformed:
                raise
            logger.warning(f"Skipping malformed document: {e}")
            continue

        if resource is None:
            continue

        rid = resource.resource_id()
        if rid in resources:
            raise DuplicateResourceError(
                rid,
                f"{source} (line {seen_at[rid]})",
                f"{source} (line {document.start_line})",
            )
        resources[rid] = resource
        seen_at[rid] = document.start_line

    return resources
