"""
Greedy token-budgeted packing of sentences into text chunks.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from ..obs.events import emit_event
from .boundaries import ByteOffsets, byte_len, sanitize_text
from .resources import ChunkerResources

# (text, start_byte, end_byte, token_count)
FlushCallback = Callable[[str, int, int, int], None]


class TokenBudgetAccumulator:
    """Packs sentences into buffers that stay under ``chunk_tokens``.

    Sentences are never split: one that alone meets the budget still opens
    a buffer of its own. Between two packed sentences the original source
    text is copied verbatim, so spacing and line breaks survive; sentences
    that touch get a single space.

    Positions passed to :meth:`add` are character indices into ``source``.
    """

    def __init__(
        self,
        source: str,
        chunk_tokens: int,
        resources: ChunkerResources,
        on_flush: FlushCallback,
        to_bytes: Optional[ByteOffsets] = None,
    ):
        self.source = source
        self.chunk_tokens = chunk_tokens
        self.resources = resources
        self.on_flush = on_flush
        self.to_bytes = to_bytes or ByteOffsets(source)

        self._parts: List[str] = []
        self._tokens = 0
        self._start = 0
        self._last_end = 0

    @property
    def is_empty(self) -> bool:
        return not self._parts

    def add(self, raw: str, start: int, end: int) -> None:
        """Append the sentence ``raw`` found at ``source[start:end]``."""
        text = sanitize_text(raw)
        if not text:
            return

        # Narrow the span to the trimmed text so offsets match what is emitted
        start += len(raw) - len(raw.lstrip(" \t\r\n"))
        end -= len(raw) - len(raw.rstrip(" \t\r\n"))

        token_count = self.resources.count_tokens(text)
        if self._parts and self._tokens + token_count >= self.chunk_tokens:
            self.flush()

        if not self._parts:
            self._start = start
        elif start > self._last_end:
            self._parts.append(self.source[self._last_end : start])
        elif start == self._last_end:
            self._parts.append(" ")
        else:
            emit_event(
                "chunk.overlap_warning",
                start=start,
                last_end=self._last_end,
            )

        self._parts.append(text)
        self._tokens += token_count
        self._last_end = end

    def flush(self) -> None:
        """Emit the buffered text as one chunk and reset."""
        if not self._parts:
            return

        text = "".join(self._parts)
        start_byte = self.to_bytes(self._start)
        self.on_flush(text, start_byte, start_byte + byte_len(text), self._tokens)

        self._parts = []
        self._tokens = 0
        self._start = 0
        self._last_end = 0
