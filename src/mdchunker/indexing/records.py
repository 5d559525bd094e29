"""Search-index records derived from chunks."""

import hashlib
from typing import List, Sequence, Union

from pydantic import BaseModel

from ..chunking.boundaries import line_span
from ..chunking.engine import Chunk


class IndexRecord(BaseModel):
    id: str
    path: str
    start_line: int
    end_line: int
    headings: List[str] = []
    text: str
    kind: str


def generate_id(path: str, start_line: int, end_line: int) -> str:
    """Stable record id: short sha1 of the path plus the line range."""
    digest = hashlib.sha1(path.encode("utf-8")).hexdigest()[:8]
    return f"{digest}:{start_line}-{end_line}"


def build_records(
    path: str, raw: Union[str, bytes], chunks: Sequence[Chunk]
) -> List[IndexRecord]:
    """Map each chunk's byte range to lines and wrap it as an index record."""
    raw_bytes = raw.encode("utf-8") if isinstance(raw, str) else raw
    records = []
    for chunk in chunks:
        start_line, end_line = line_span(raw_bytes, chunk.start_idx, chunk.end_idx)
        records.append(
            IndexRecord(
                id=generate_id(path, start_line, end_line),
                path=path,
                start_line=start_line,
                end_line=end_line,
                headings=list(chunk.headings),
                text=chunk.text,
                kind=chunk.kind.value,
            )
        )
    return records
