"""In-memory document store keyed by document id."""

import logging
import threading

from markdown_brain.index.models import Document

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Authoritative mapping from document id to Document.

    Every write may carry a version. The store remembers the highest version
    applied per id (including removals and across ``clear()``) and discards
    writes older than that, so an event that was read before a newer one
    cannot overwrite the newer state.

    Thread Safety:
        All operations take an internal lock. Records are immutable, so a
        snapshot is a consistent point-in-time view once returned.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._versions: dict[str, int] = {}
        self._lock = threading.Lock()

    def upsert(self, doc_id: str, document: Document, version: int | None = None) -> bool:
        """
        Insert or fully replace the record for ``doc_id``.

        Returns:
            True if the write was applied, False if it was stale.
        """
        with self._lock:
            if not self._accept(doc_id, version):
                logger.debug("Discarding stale write for %s (version %s)", doc_id, version)
                return False
            self._documents[doc_id] = document
            return True

    def remove(self, doc_id: str, version: int | None = None) -> bool:
        """
        Delete the record for ``doc_id`` if present.

        Returns:
            True if a record was deleted, False if absent or stale.
        """
        with self._lock:
            if not self._accept(doc_id, version):
                logger.debug("Discarding stale removal for %s (version %s)", doc_id, version)
                return False
            return self._documents.pop(doc_id, None) is not None

    def get(self, doc_id: str) -> Document | None:
        """Get a document by id."""
        with self._lock:
            return self._documents.get(doc_id)

    def snapshot(self) -> tuple[Document, ...]:
        """All current documents in insertion order."""
        with self._lock:
            return tuple(self._documents.values())

    def clear(self) -> None:
        """Remove all records. Version watermarks are kept."""
        with self._lock:
            self._documents.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        with self._lock:
            return doc_id in self._documents

    def _accept(self, doc_id: str, version: int | None) -> bool:
        """Check and advance the version watermark. Caller holds the lock."""
        if version is None:
            return True
        current = self._versions.get(doc_id)
        if current is not None and version < current:
            return False
        self._versions[doc_id] = version
        return True
