"""
Markdown chunking package.

Structure-aware splitting with heading context, verbatim code blocks,
sentence-aware token budgets and exact byte spans into the source.
"""

from .accumulator import TokenBudgetAccumulator
from .boundaries import ChunkType, count_tokens, line_span, sanitize_text
from .engine import Chunk, MarkdownStructureWalker, chunk_document
from .nodes import parse_markdown
from .resources import ChunkerResources, default_resources, load_resources
from .sentences import Sentence, sentence_spans, split_sentences

__all__ = [
    "Chunk",
    "ChunkType",
    "ChunkerResources",
    "MarkdownStructureWalker",
    "Sentence",
    "TokenBudgetAccumulator",
    "chunk_document",
    "count_tokens",
    "default_resources",
    "line_span",
    "load_resources",
    "parse_markdown",
    "sanitize_text",
    "sentence_spans",
    "split_sentences",
]
