"""
Bounded-concurrency fan-out: discover Markdown files, chunk them, hand records to a sink.
"""

from __future__ import annotations

import concurrent.futures
import json
import os
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..chunking.engine import chunk_document
from ..chunking.resources import ChunkerResources, default_resources
from ..core.errors import IndexingError
from ..obs.events import emit_event
from .records import IndexRecord, build_records

RecordSink = Callable[[List[IndexRecord]], None]

DEFAULT_EXTENSIONS = (".md", ".mdx")


@dataclass
class IndexSummary:
    documents: int = 0
    chunks: int = 0
    failed: List[str] = field(default_factory=list)
    duration_ms: int = 0


class JsonlSink:
    """Thread-safe sink appending records to a JSON lines file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def __call__(self, records: List[IndexRecord]) -> None:
        lines = "".join(
            json.dumps(record.model_dump(), ensure_ascii=False) + "\n"
            for record in records
        )
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(lines)


def discover_files(
    dirs: Iterable[Path], extensions: Sequence[str] = DEFAULT_EXTENSIONS
) -> List[Path]:
    """Recursively collect files with one of ``extensions`` under each directory."""
    wanted = {ext.lower() for ext in extensions}
    found: List[Path] = []
    for root in dirs:
        matches = [
            p
            for p in Path(root).rglob("*")
            if p.is_file() and p.suffix.lower() in wanted
        ]
        found.extend(sorted(matches))
    return found


def _index_one(
    path: Path,
    base_dir: Path,
    sink: RecordSink,
    chunk_tokens: int,
    overlap_tokens: int,
    resources: ChunkerResources,
    strict_offsets: bool,
) -> int:
    raw = path.read_bytes()
    chunks = chunk_document(
        raw.decode("utf-8"),
        chunk_tokens=chunk_tokens,
        overlap_tokens=overlap_tokens,
        resources=resources,
        strict_offsets=strict_offsets,
    )
    relative = os.path.relpath(path, base_dir)
    records = build_records(relative, raw, chunks)
    if records:
        sink(records)
    return len(records)


def index_documents(
    dirs: Iterable[Path],
    sink: RecordSink,
    chunk_tokens: int = 350,
    overlap_tokens: int = 50,
    concurrency: int = 30,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    base_dir: Optional[Path] = None,
    resources: Optional[ChunkerResources] = None,
    strict_offsets: bool = False,
) -> IndexSummary:
    """
    Chunk every Markdown file under ``dirs`` and pass each file's records to ``sink``.

    Each document is one unit of work on a thread pool of ``concurrency``
    workers; all workers share one set of tokenizer resources. ``sink`` is
    called from worker threads.

    Raises:
        IndexingError: for the first failed document, after all others finished
    """
    if concurrency <= 0:
        raise ValueError(f"concurrency must be positive, got {concurrency}")

    base = Path(base_dir) if base_dir else Path.cwd()
    shared = resources or default_resources()
    paths = discover_files(dirs, extensions)
    summary = IndexSummary()
    first_error: Optional[IndexingError] = None
    started = time.time()

    emit_event("index.start", docs=len(paths), concurrency=concurrency)

    with concurrent.futures.ThreadPoolExecutor(max_workers=concurrency) as executor:
        future_to_path = {
            executor.submit(
                _index_one,
                path,
                base,
                sink,
                chunk_tokens,
                overlap_tokens,
                shared,
                strict_offsets,
            ): path
            for path in paths
        }

        for future in concurrent.futures.as_completed(future_to_path):
            path = future_to_path[future]
            try:
                count = future.result()
            except Exception as e:
                summary.failed.append(str(path))
                emit_event("index.error", path=str(path), reason=str(e))
                if first_error is None:
                    first_error = IndexingError(str(path), e)
                continue

            summary.documents += 1
            summary.chunks += count
            emit_event("index.document", level="debug", path=str(path), chunks=count)

    summary.duration_ms = int((time.time() - started) * 1000)
    emit_event(
        "index.complete",
        docs=summary.documents,
        chunks=summary.chunks,
        failed=len(summary.failed),
        duration_ms=summary.duration_ms,
    )

    if first_error is not None:
        raise first_error from first_error.cause
    return summary
