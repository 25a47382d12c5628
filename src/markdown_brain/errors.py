"""Exception types for markdown-brain.

Query-time errors never reach the transport as exceptions: the dispatcher
turns every ``BrainError`` into a structured error mapping using ``code``.
"""


class BrainError(Exception):
    """Base class for all markdown-brain errors."""

    code = "error"


class InvalidArgumentError(BrainError):
    """A query argument is malformed (bad limit, blank query, bad date)."""

    code = "invalid_argument"


class DocumentNotFoundError(BrainError):
    """No document is stored under the requested id."""

    code = "not_found"

    def __init__(self, doc_id: str):
        super().__init__(f"Document not found: {doc_id}")
        self.doc_id = doc_id


class IndexNotReadyError(BrainError):
    """The search index has not been built yet."""

    code = "index_not_ready"

    def __init__(self, message: str = "Index not ready: no documents loaded yet"):
        super().__init__(message)


class RootDirectoryError(BrainError):
    """The documents root is missing and cannot be created."""

    code = "root_unavailable"
