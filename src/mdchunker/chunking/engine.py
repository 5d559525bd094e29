"""
Markdown chunking engine: heading-aware structural walk with token-budgeted text packing.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional

from ..obs.events import emit_event
from .accumulator import TokenBudgetAccumulator
from .boundaries import ByteOffsets, ChunkType
from .nodes import (
    CodeBlock,
    Document,
    Heading,
    Node,
    Opaque,
    Paragraph,
    Text,
    parse_markdown,
)
from .resources import ChunkerResources, default_resources
from .sentences import sentence_spans

FENCE = "```"


class Chunk(NamedTuple):
    """A retrieval-ready piece of a document.

    ``start_idx``/``end_idx`` are a half-open UTF-8 byte range in the source.
    For code chunks they cover the content lines only, not the fences that
    ``text`` is wrapped in.
    """

    text: str
    start_idx: int
    end_idx: int
    kind: ChunkType
    headings: List[str]


class MarkdownStructureWalker:
    """Depth-first walk over a parsed document that emits chunks in order.

    Owns the heading stack for one document. Heading and code block nodes
    flush pending text before anything else, so no chunk straddles either.
    """

    def __init__(self, source: str, chunk_tokens: int, resources: ChunkerResources):
        self.source = source
        self.resources = resources
        self.to_bytes = ByteOffsets(source)
        self.headings: List[str] = []
        self.chunks: List[Chunk] = []
        self.accumulator = TokenBudgetAccumulator(
            source,
            chunk_tokens,
            resources,
            on_flush=self._emit_text,
            to_bytes=self.to_bytes,
        )

    def run(self, document: Document) -> List[Chunk]:
        self.visit(document, None)
        self.accumulator.flush()
        return self.chunks

    def visit(self, node: Node, parent: Optional[Node]) -> None:
        if isinstance(node, Heading):
            self._enter_heading(node)
            self._visit_children(node)
        elif isinstance(node, CodeBlock):
            self._emit_code(node)
        elif isinstance(node, Text):
            # Heading text is already on the heading stack
            if not isinstance(parent, Heading):
                self._feed_text(node)
        elif isinstance(node, (Document, Paragraph, Opaque)):
            self._visit_children(node)
        else:
            raise TypeError(f"unhandled node type: {type(node).__name__}")

    def _visit_children(self, node: Node) -> None:
        for child in node.children:  # type: ignore[union-attr]
            self.visit(child, node)

    def _enter_heading(self, node: Heading) -> None:
        self.accumulator.flush()
        level = node.level
        if level > len(self.headings):
            self.headings.extend([""] * (level - len(self.headings)))
        else:
            del self.headings[level:]
        self.headings[level - 1] = node.text

    def _feed_text(self, node: Text) -> None:
        raw = self.source[node.start : node.end]
        stripped = raw.strip()
        if not stripped:
            return

        offset = node.start + (len(raw) - len(raw.lstrip()))
        for sentence in sentence_spans(stripped, self.resources):
            self.accumulator.add(
                sentence.text, offset + sentence.start, offset + sentence.end
            )

    def _emit_code(self, node: CodeBlock) -> None:
        self.accumulator.flush()

        body = node.body
        if body and not body.endswith("\n"):
            body += "\n"
        text = f"{FENCE}{node.info}\n{body}{FENCE}"

        start = self.to_bytes(node.content_start)
        end = self.to_bytes(node.content_end)
        self._append(Chunk(text, start, end, ChunkType.CODE, list(self.headings)))

    def _emit_text(self, text: str, start: int, end: int, token_count: int) -> None:
        self._append(
            Chunk(text, start, end, ChunkType.TEXT, list(self.headings)),
            token_count=token_count,
        )

    def _append(self, chunk: Chunk, token_count: Optional[int] = None) -> None:
        self.chunks.append(chunk)
        emit_event(
            "chunk.emit",
            level="debug",
            kind=chunk.kind.value,
            start_idx=chunk.start_idx,
            end_idx=chunk.end_idx,
            token_count=token_count,
            depth=len(chunk.headings),
        )


def chunk_document(
    text_md: str,
    chunk_tokens: int = 350,
    overlap_tokens: int = 50,
    resources: Optional[ChunkerResources] = None,
    strict_offsets: bool = False,
) -> List[Chunk]:
    """
    Chunk a Markdown document into ordered text and code chunks.

    Args:
        text_md: Raw Markdown text
        chunk_tokens: Token budget per text chunk; a single sentence over
            budget is still emitted whole
        overlap_tokens: Accepted for interface compatibility; chunks do not
            overlap
        resources: Shared tokenizer resources (default: process-wide instance)
        strict_offsets: Raise OffsetReconciliationError instead of
            approximating spans that cannot be located in the source

    Returns:
        Chunks in document order with byte offsets and heading context

    Raises:
        ValueError: if ``chunk_tokens`` is not positive
        ParseError: if the document cannot be parsed
        InitializationError: if default resources cannot be loaded
    """
    if chunk_tokens <= 0:
        raise ValueError(f"chunk_tokens must be positive, got {chunk_tokens}")

    if not text_md:
        return []

    if resources is None:
        resources = default_resources()

    document = parse_markdown(text_md, strict_offsets=strict_offsets)
    chunks = MarkdownStructureWalker(text_md, chunk_tokens, resources).run(document)

    emit_event(
        "chunk.document_complete",
        chunks=len(chunks),
        chunk_tokens=chunk_tokens,
        overlap_tokens=overlap_tokens,
    )
    return chunks
