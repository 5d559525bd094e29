"""
Sentence segmentation driven by morphological tokenization.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional

from .resources import ChunkerResources

# ASCII and full-width sentence terminators
TERMINAL_MARKS = frozenset({".", "!", "?", "。", "！", "？"})


class Sentence(NamedTuple):
    """A sentence and its half-open character span within the segmented text."""

    text: str
    start: int
    end: int


def sentence_spans(span: str, resources: ChunkerResources) -> List[Sentence]:
    """Split ``span`` into sentences, keeping each one's position in ``span``.

    Tokens are accumulated until a token that is exactly a terminal mark
    closes the sentence. Any trailing tokens form a final sentence, so a span
    without terminal marks comes back whole. Every sentence is a verbatim slice
    of ``span``.
    """
    if not span:
        return []

    sentences: List[Sentence] = []
    cursor = 0
    start: Optional[int] = None

    for surface in resources.surfaces(span):
        if not surface:
            continue
        pos = span.find(surface, cursor)
        if pos == -1:
            # Surface was normalized by the tokenizer; assume it covers the next chars
            pos = cursor
        if start is None:
            start = pos
        cursor = min(pos + len(surface), len(span))

        if surface in TERMINAL_MARKS:
            sentences.append(Sentence(span[start:cursor], start, cursor))
            start = None

    if start is not None and start < cursor:
        sentences.append(Sentence(span[start:cursor], start, cursor))

    if not sentences:
        return [Sentence(span, 0, len(span))]

    return sentences


def split_sentences(span: str, resources: ChunkerResources) -> List[str]:
    """Split ``span`` into ordered sentence strings."""
    return [sentence.text for sentence in sentence_spans(span, resources)]
