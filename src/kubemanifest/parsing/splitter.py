#!/usr/bin/env python3
"""
KUBEMANIFEST SPLITTER - Document Sharder
----------------------------------------
Breaks a multi-document YAML byte stream into one byte slice per document.
Works line by line and keeps block-scalar state (|, >) so that literal
content is passed through untouched and never mistaken for structure.

Author: KubeManifest Team
Date: 2026-10-19
"""

import io
import re
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, Union

BOM = b'\xef\xbb\xbf'

# A block scalar header at the end of a line: "key: |", "- >-", "--- |2"
BLOCK_INDICATOR = re.compile(rb'(?:^|[ \t])[|>][1-9+\-]{0,2}$')

Stream = Union[str, bytes, bytearray, memoryview, BinaryIO]


@dataclass
class RawDocument:
    """One document's bytes and the 1-based stream line it starts on."""
    data: bytes
    start_line: int


def _is_marker(body: bytes, marker: bytes) -> bool:
    """Column-0 '---' or '...' alone or followed by whitespace."""
    if not body.startswith(marker):
        return False
    return len(body) == 3 or body[3:4] in (b' ', b'\t')


def _indent_of(body: bytes) -> int:
    return len(body) - len(body.lstrip(b' \t'))


class DocumentSplitter:
    """
    Lazily splits a byte stream into RawDocuments.

    Blank lines and comments outside any document are dropped, so a comment
    header above the first '---' never becomes a document of its own.
    A splitter can be consumed exactly once.
    """

    def __init__(self, stream: Stream):
        if isinstance(stream, str):
            stream = stream.encode("utf-8")
        if isinstance(stream, (bytes, bytearray, memoryview)):
            stream = io.BytesIO(bytes(stream))
        self.stream = stream
        self.block_indent: Optional[int] = None
        self._consumed = False

    def _find_comment_split(self, text: bytes) -> int:
        """Protects quotes and # symbols inside values."""
        in_double_quote = in_single_quote = escaped = False
        for i, char in enumerate(text):
            if escaped:
                escaped = False
                continue
            if char == 0x5c and in_double_quote:  # backslash
                escaped = True
                continue
            if char == 0x22 and not in_single_quote:  # "
                in_double_quote = not in_double_quote
            elif char == 0x27 and not in_double_quote:  # '
                in_single_quote = not in_single_quote
            elif char == 0x23 and not in_double_quote and not in_single_quote:  # #
                if i == 0 or text[i - 1:i].isspace():
                    return i
        return -1

    def opens_block(self, body: bytes) -> bool:
        """True if the line ends with a block scalar header."""
        if b'|' not in body and b'>' not in body:
            return False
        code = body
        if b'#' in code:
            split_idx = self._find_comment_split(code)
            if split_idx != -1:
                code = code[:split_idx]
        return bool(BLOCK_INDICATOR.search(code.rstrip()))

    def _in_block(self, body: bytes) -> bool:
        """
        Consumes the line as block scalar content if a block is open,
        closing the block on the first line that is not.
        """
        if self.block_indent is None:
            return False
        if not body.strip():
            return True
        if self.block_indent < 0:
            # Top-level block: only document markers end it
            if _is_marker(body, b'---') or _is_marker(body, b'...'):
                self.block_indent = None
                return False
            return True
        if _indent_of(body) > self.block_indent:
            return True
        self.block_indent = None
        return False

    def documents(self) -> Iterator[RawDocument]:
        if self._consumed:
            raise RuntimeError("DocumentSplitter can only be consumed once")
        self._consumed = True
        return self._split()

    def _split(self) -> Iterator[RawDocument]:
        buffer = []
        start_line = 1
        has_content = False
        has_directive = False
        self.block_indent = None

        for line_no, line in enumerate(self.stream, 1):
            if line_no == 1 and line.startswith(BOM):
                line = line[len(BOM):]
            body = line.rstrip(b'\r\n')

            # 1. Block protection
            if self._in_block(body):
                buffer.append(line)
                continue

            # 2. Document start
            if _is_marker(body, b'---'):
                # A directive prologue ("%YAML 1.2") travels with its document
                if not (has_directive and not has_content):
                    if has_content:
                        yield RawDocument(b''.join(buffer), start_line)
                    buffer, has_content, has_directive = [], False, False

                rest = body[3:].strip()
                if rest and not rest.startswith(b'#'):
                    has_content = True
                    if self.opens_block(body):
                        self.block_indent = -1
                if buffer or has_content:
                    if not buffer:
                        start_line = line_no
                    buffer.append(line)
                continue

            # 3. Document end
            if _is_marker(body, b'...'):
                if has_content:
                    yield RawDocument(b''.join(buffer), start_line)
                buffer, has_content, has_directive = [], False, False
                continue

            # 4. Directives, comments and content
            stripped = body.strip()
            if not has_content and body.startswith(b'%'):
                has_directive = True
            elif stripped and not stripped.startswith(b'#'):
                has_content = True
                if self.opens_block(body):
                    self.block_indent = _indent_of(body)

            if not buffer:
                start_line = line_no
            buffer.append(line)

        if has_content:
            yield RawDocument(b''.join(buffer), start_line)


def split_documents(stream: Stream) -> Iterator[bytes]:
    """Yields the bytes of each document in the stream, in order."""
    for document in DocumentSplitter(stream).documents():
        yield document.data
