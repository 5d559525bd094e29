"""
Process-wide tokenizer resources shared by every chunking call.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

import tiktoken
from janome.tokenizer import Tokenizer

from ..core.errors import InitializationError
from ..core.logging import log
from .boundaries import count_tokens

DEFAULT_ENCODING = "cl100k_base"


@dataclass(frozen=True)
class ChunkerResources:
    """Immutable bundle of the morphological tokenizer and the token encoding.

    Built once at startup and passed explicitly into each chunking call.
    Safe to share between threads.
    """

    tokenizer: Tokenizer
    encoding: tiktoken.Encoding
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def surfaces(self, text: str) -> List[str]:
        """Morphological surface forms of ``text`` in order."""
        # janome makes no thread-safety promise; serialize access
        with self._lock:
            return list(self.tokenizer.tokenize(text, wakati=True))

    def count_tokens(self, text: str) -> int:
        return count_tokens(text, self.encoding)


def load_resources(encoding_name: str = DEFAULT_ENCODING) -> ChunkerResources:
    """Load the janome dictionary and the tiktoken encoding.

    Raises:
        InitializationError: if either resource cannot be constructed.
    """
    try:
        tokenizer = Tokenizer(wakati=True)
    except Exception as e:
        raise InitializationError(
            f"failed to load morphological tokenizer: {e}"
        ) from e

    try:
        encoding = tiktoken.get_encoding(encoding_name)
    except Exception as e:
        raise InitializationError(
            f"failed to load token encoding {encoding_name!r}: {e}"
        ) from e

    log.info("chunker.resources_loaded", encoding=encoding_name)
    return ChunkerResources(tokenizer=tokenizer, encoding=encoding)


@lru_cache(maxsize=None)
def default_resources(encoding_name: str = DEFAULT_ENCODING) -> ChunkerResources:
    """Lazily built shared resources; a failed load is not cached."""
    return load_resources(encoding_name)
