"""
Structural Markdown tree used by the chunking walker.

markdown-it-py produces a flat token stream whose inline tokens carry no
source positions. This module folds that stream into a small closed set of
node kinds and pins every text node to its character span in the source.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Sequence, Tuple, Union

from markdown_it import MarkdownIt
from markdown_it.token import Token

from ..core.errors import OffsetReconciliationError, ParseError
from ..obs.events import emit_event


@dataclass
class Text:
    """Inline text with its half-open character span in the source."""

    start: int
    end: int


@dataclass
class CodeBlock:
    """A code block; ``content_start``/``content_end`` exclude the fences."""

    info: str
    body: str
    content_start: int
    content_end: int
    fenced: bool = True


@dataclass
class Heading:
    level: int
    text: str = ""
    children: List["Node"] = field(default_factory=list)


@dataclass
class Paragraph:
    children: List["Node"] = field(default_factory=list)


@dataclass
class Opaque:
    """Lists, block quotes, HTML blocks and rules: walked through, never chunked on."""

    kind: str
    children: List["Node"] = field(default_factory=list)


@dataclass
class Document:
    children: List["Node"] = field(default_factory=list)


Node = Union[Document, Paragraph, Heading, CodeBlock, Text, Opaque]
Container = Union[Document, Paragraph, Heading, Opaque]


@lru_cache(maxsize=1)
def _parser() -> MarkdownIt:
    md = MarkdownIt("commonmark")
    # Keep escapes and entities as separate tokens so their raw markup is known
    md.disable("text_join", ignoreInvalid=True)
    return md


# Line terminators as markdown-it counts them
_LINE_BREAK = re.compile(r"\r\n?|\n")


class _LineTable:
    """Character offset of the start of every source line."""

    def __init__(self, source: str):
        self.source = source
        self.starts = [0]
        self.starts.extend(m.end() for m in _LINE_BREAK.finditer(source))

    def start(self, line: int) -> int:
        if line < len(self.starts):
            return self.starts[line]
        return len(self.source)

    def text(self, line: int) -> str:
        return self.source[self.start(line) : self.start(line + 1)]


class _TextLocator:
    """Finds inline fragments left to right inside one block's source lines."""

    def __init__(self, source: str, region: Tuple[int, int], strict: bool):
        self.source = source
        self.cursor, self.limit = region
        self.strict = strict

    def locate(self, fragment: str) -> Text:
        pos = self.source.find(fragment, self.cursor, self.limit)
        if pos == -1:
            return self._recover(fragment)
        self.cursor = pos + len(fragment)
        return Text(pos, self.cursor)

    def _recover(self, fragment: str) -> Text:
        if self.strict:
            raise OffsetReconciliationError(
                f"cannot locate text {fragment[:40]!r} at offset {self.cursor}",
                cursor=self.cursor,
                fragment=fragment,
            )
        emit_event(
            "chunk.offset_warning",
            cursor=self.cursor,
            fragment=fragment[:80],
        )
        start = self.cursor
        self.cursor = min(start + len(fragment), self.limit)
        return Text(start, self.cursor)


def _raw_form(token: Token) -> str:
    if token.type == "text_special":
        return token.markup or token.content
    return token.content


def _inline_nodes(children: Sequence[Token], locator: _TextLocator) -> List[Node]:
    nodes: List[Node] = []
    run: List[str] = []

    def close_run() -> None:
        if run:
            fragment = "".join(run)
            run.clear()
            nodes.append(locator.locate(fragment))

    for token in children:
        if token.type in ("text", "text_special"):
            if token.content:
                run.append(_raw_form(token))
            continue

        close_run()
        if token.type == "code_inline":
            if token.content:
                nodes.append(locator.locate(token.content))
        elif token.type == "image" and token.children:
            nodes.extend(_inline_nodes(token.children, locator))
        # breaks, emphasis/link markers and raw HTML carry no chunkable text

    close_run()
    return nodes


def _plain_text(children: Sequence[Token]) -> str:
    parts: List[str] = []
    for token in children:
        if token.type in ("text", "text_special", "code_inline"):
            parts.append(token.content)
        elif token.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif token.type == "image" and token.children:
            parts.append(_plain_text(token.children))
    return "".join(parts).strip()


def _code_block(token: Token, lines: _LineTable, top_level: bool) -> CodeBlock:
    first, last = token.map or (0, 0)
    if token.type == "fence":
        content_first = first + 1
        # Count lines in the parsed body; raw lines may carry container prefixes
        content = token.content
        line_count = content.count("\n")
        if content and not content.endswith("\n"):
            line_count += 1
        content_last = min(content_first + line_count, last)
        # Container prefixes make the raw lines unusable as the body
        body = (
            "".join(lines.text(i) for i in range(content_first, content_last))
            if top_level
            else token.content
        )
        return CodeBlock(
            info=token.info.strip(),
            body=body,
            content_start=lines.start(content_first),
            content_end=lines.start(content_last),
        )

    return CodeBlock(
        info="",
        body=token.content,
        content_start=lines.start(first),
        content_end=lines.start(last),
        fenced=False,
    )


def _open_node(token: Token) -> Container:
    if token.type == "paragraph_open":
        return Paragraph()
    if token.type == "heading_open":
        return Heading(level=int(token.tag[1:]))
    return Opaque(kind=token.type[: -len("_open")])


def parse_markdown(source: str, strict_offsets: bool = False) -> Document:
    """Parse ``source`` into a :class:`Document` tree.

    Args:
        source: Raw Markdown text
        strict_offsets: Raise instead of approximating text spans that cannot
            be located in the source

    Raises:
        ParseError: if the Markdown parser fails
        OffsetReconciliationError: only when ``strict_offsets`` is set
    """
    try:
        tokens = _parser().parse(source)
    except Exception as e:
        raise ParseError(f"failed to parse markdown: {e}") from e

    lines = _LineTable(source)
    root = Document()
    stack: List[Container] = [root]

    for token in tokens:
        parent = stack[-1]
        if token.nesting == 1:
            node = _open_node(token)
            parent.children.append(node)
            stack.append(node)
        elif token.nesting == -1:
            stack.pop()
        elif token.type == "inline":
            first, last = token.map or (0, len(lines.starts))
            locator = _TextLocator(
                source, (lines.start(first), lines.start(last)), strict_offsets
            )
            children = token.children or []
            if isinstance(parent, Heading):
                parent.text = _plain_text(children)
            parent.children.extend(_inline_nodes(children, locator))
        elif token.type in ("fence", "code_block"):
            parent.children.append(_code_block(token, lines, len(stack) == 1))
        else:
            parent.children.append(Opaque(kind=token.type))

    return root

