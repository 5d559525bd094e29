"""Error taxonomy for the chunking core and the indexing pipeline."""


class MdChunkerError(Exception):
    """Base class for all mdchunker errors."""


class InitializationError(MdChunkerError):
    """Raised when the morphological tokenizer or token encoding cannot be loaded.

    Fatal: nothing can be chunked without them, so callers should abort
    startup rather than retry per document.
    """


class ParseError(MdChunkerError):
    """Raised when the Markdown parser rejects a document."""


class OffsetReconciliationError(MdChunkerError):
    """Raised in strict mode when a text span cannot be located in its source."""

    def __init__(self, message: str, *, cursor: int, fragment: str):
        super().__init__(message)
        self.cursor = cursor
        self.fragment = fragment


class IndexingError(MdChunkerError):
    """Raised by the fan-out runner when a document fails to index."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"failed to index {path}: {cause}")
        self.path = path
        self.cause = cause
