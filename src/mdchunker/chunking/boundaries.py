"""
Text normalization, token counting and coordinate helpers for chunking.
"""

from enum import Enum
from typing import Tuple, Union

import tiktoken


class ChunkType(str, Enum):
    """Kinds of emitted chunks."""

    TEXT = "text"
    CODE = "code"


def sanitize_text(text: str) -> str:
    """Normalize CRLF to LF and trim surrounding spaces, tabs and newlines.

    Internal spacing and punctuation are left untouched, and a lone ``\\r``
    survives, so the function is idempotent.
    """
    return text.replace("\r\n", "\n").strip(" \t\n")


def count_tokens(text: str, encoding: tiktoken.Encoding) -> int:
    """Count sub-word tokens of ``text`` under ``encoding``."""
    return len(encoding.encode(text, disallowed_special=()))


def line_span(doc: Union[str, bytes], start: int, end: int) -> Tuple[int, int]:
    """Map a byte range of ``doc`` to 1-based inclusive (start_line, end_line).

    ``str`` documents are UTF-8 encoded first so ``start``/``end`` are always
    byte offsets, the coordinates chunks carry.
    """
    raw = doc.encode("utf-8") if isinstance(doc, str) else doc
    start_line = raw.count(b"\n", 0, start) + 1
    end_line = start_line + raw.count(b"\n", start, end)
    return start_line, end_line


def byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


class ByteOffsets:
    """Incremental character-index to UTF-8 byte-offset conversion.

    Lookups are cheap when positions are requested in increasing order, which
    is how a single forward pass over a document asks for them.
    """

    def __init__(self, text: str):
        self.text = text
        self._char = 0
        self._byte = 0

    def __call__(self, index: int) -> int:
        index = min(index, len(self.text))
        if index < self._char:
            self._char, self._byte = 0, 0
        self._byte += byte_len(self.text[self._char : index])
        self._char = index
        return self._byte
