"""Turning chunks into search-index records, one document or a whole tree at a time."""

from .records import IndexRecord, build_records, generate_id
from .runner import IndexSummary, JsonlSink, discover_files, index_documents

__all__ = [
    "IndexRecord",
    "IndexSummary",
    "JsonlSink",
    "build_records",
    "discover_files",
    "generate_id",
    "index_documents",
]
