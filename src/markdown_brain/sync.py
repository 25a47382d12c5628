"""Keeps the document store and search index in sync with the docs root.

The synchronizer scans the tree once at startup, then applies watchdog
events on a single worker thread (``brain-sync``), which is the only writer
to the store after startup. Each event carries a version taken on arrival;
the store discards writes older than the newest applied for the same id, so
a stale read can never clobber fresher state.

Index rebuilds are debounced: after a mutation the worker waits until the
event queue has been quiet for ``debounce`` seconds, then rebuilds once from
the current snapshot. A continuous stream of events still triggers a rebuild
every ``max_rebuild_delay`` seconds.
"""

import itertools
import logging
import queue
import threading
import time
from datetime import datetime, timezone
from pathlib import Path

from markdown_brain.errors import RootDirectoryError
from markdown_brain.index.models import Document
from markdown_brain.index.normalizer import normalize
from markdown_brain.index.parser import derive_title, parse_frontmatter
from markdown_brain.index.search import DEFAULT_THRESHOLD, SearchIndex, SearchIndexHandle
from markdown_brain.index.store import DocumentStore
from markdown_brain.index.walker import relative_id, relative_prefix, walk_root
from markdown_brain.watcher import EventKind, FileEvent, Watcher

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 0.25
DEFAULT_MAX_REBUILD_DELAY = 2.0

_STOP = object()
_RESCAN = object()


def build_document(doc_id: str, raw: str, mtime: float) -> Document:
    """Build a Document from one read of a file."""
    metadata, body = parse_frontmatter(raw, doc_id)
    plain_text, tokens = normalize(body)
    return Document(
        id=doc_id,
        title=derive_title(metadata, doc_id),
        plain_text=plain_text,
        metadata=metadata,
        last_modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
        tokens=frozenset(tokens),
    )


class Synchronizer:
    """Discovers documents and applies filesystem events to the store."""

    def __init__(
        self,
        root: Path,
        store: DocumentStore,
        index_handle: SearchIndexHandle,
        extension: str = ".md",
        debounce: float = DEFAULT_DEBOUNCE,
        max_rebuild_delay: float = DEFAULT_MAX_REBUILD_DELAY,
        threshold: float = DEFAULT_THRESHOLD,
        watch: bool = True,
    ):
        """
        Initialize the synchronizer.

        Args:
            root: The docs root directory (created on start if missing)
            store: Store to populate
            index_handle: Handle the rebuilt search index is published to
            extension: File extension of documents
            debounce: Quiet period in seconds before a rebuild
            max_rebuild_delay: Longest a mutation may wait for a rebuild
            threshold: Fuzzy match threshold for built indexes
            watch: Subscribe to filesystem notifications on start
        """
        if debounce < 0:
            raise ValueError(f"Debounce must be >= 0, got {debounce}")

        self.root = root.expanduser()
        self._store = store
        self._index_handle = index_handle
        self._extension = extension
        self._debounce = debounce
        self._max_rebuild_delay = max_rebuild_delay
        self._threshold = threshold
        self._watch = watch

        self._queue: queue.Queue = queue.Queue()
        self._versions = itertools.count(1)
        self._version_lock = threading.Lock()
        self._dirty_since: float | None = None
        self._watcher: Watcher | None = None
        self._thread: threading.Thread | None = None
        self.rebuild_count = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def next_version(self) -> int:
        """Next value of the monotonic event version counter."""
        with self._version_lock:
            return next(self._versions)

    def ensure_root(self) -> Path:
        """Create the docs root if needed and resolve it."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RootDirectoryError(f"Cannot create docs root {self.root}: {e}") from e
        if not self.root.is_dir():
            raise RootDirectoryError(f"Docs root is not a directory: {self.root}")
        self.root = self.root.resolve()
        return self.root

    # Lifecycle

    def start(self) -> None:
        """
        Load every document, build the index and start watching.

        The watcher is started before the scan so no change is missed; its
        events queue up and are applied by the worker once the scan is done.
        """
        if self.running:
            logger.warning("Synchronizer already running")
            return

        self.ensure_root()
        logger.info("Initializing markdown documents from %s", self.root)
        self._store.clear()

        if self._watch:
            self._watcher = Watcher(self.root, self.submit)
            self._watcher.start()

        count = self.scan()
        self.rebuild()
        logger.info("Loaded %d documents", count)

        self._thread = threading.Thread(target=self._run, name="brain-sync", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop watching and shut down the worker."""
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None

        if self._thread is None:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout=5)
        if self._thread.is_alive():
            logger.warning("Sync worker did not stop cleanly")
        else:
            logger.info("Synchronizer stopped")
        self._thread = None

    # Event intake

    def submit(self, kind: EventKind, path: Path, is_directory: bool = False) -> FileEvent:
        """Queue a filesystem event, stamping it with the next version."""
        event = FileEvent(kind=kind, path=Path(path), version=self.next_version(), is_directory=is_directory)
        self._queue.put(event)
        return event

    def request_rescan(self) -> None:
        """Queue a full reconcile of the store against the tree."""
        self._queue.put(_RESCAN)

    def drain(self) -> None:
        """Apply every queued event on the calling thread, then rebuild if needed.

        Only valid while the worker thread is not running.
        """
        if self.running:
            raise RuntimeError("drain() cannot be used while the sync worker is running")
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is not _STOP:
                self._handle(item)
        if self._dirty_since is not None:
            self.rebuild()

    # Store mutation

    def scan(self) -> int:
        """Load every eligible file under the root. Returns the number loaded."""
        count = 0
        for file_info in walk_root(self.root, self._extension):
            if self._load(file_info.path, file_info.relative_path, self.next_version()):
                count += 1
        return count

    def rescan(self) -> tuple[int, int]:
        """
        Reconcile the store with the tree.

        Returns:
            Tuple of (upserted, removed) counts.
        """
        # Removals use the version from before the walk, so a file created
        # during the walk (newer event) is not deleted by it
        floor = self.next_version()
        seen: set[str] = set()
        upserted = 0
        for file_info in walk_root(self.root, self._extension):
            seen.add(file_info.relative_path)
            # Version taken before the read, so an event submitted while the
            # file is being read supersedes it
            version = self.next_version()
            document = self._read(file_info.path, file_info.relative_path)
            if document is None or self._store.get(file_info.relative_path) == document:
                continue
            if self._store.upsert(file_info.relative_path, document, version):
                upserted += 1

        removed = 0
        for document in self._store.snapshot():
            if document.id not in seen and self._store.remove(document.id, floor):
                removed += 1

        if upserted or removed:
            self._mark_dirty()
            logger.info("Rescan: %d upserted, %d removed", upserted, removed)
        else:
            logger.debug("Rescan: no changes detected")
        return upserted, removed

    def apply(self, event: FileEvent) -> bool:
        """
        Apply one event to the store.

        Returns:
            True if the store changed.
        """
        if event.is_directory:
            changed = self._apply_directory(event)
        else:
            doc_id = relative_id(self.root, event.path, self._extension)
            if doc_id is None:
                return False
            logger.debug("Document %s: %s (version %d)", event.kind.value, doc_id, event.version)
            if event.kind is EventKind.REMOVED:
                changed = self._store.remove(doc_id, event.version)
            else:
                changed = self._load(event.path, doc_id, event.version)

        if changed:
            self._mark_dirty()
        return changed

    def _apply_directory(self, event: FileEvent) -> bool:
        if event.kind is EventKind.REMOVED:
            prefix = relative_prefix(self.root, event.path)
            if prefix is None:
                return False
            changed = False
            for document in self._store.snapshot():
                if document.id.startswith(prefix):
                    changed = self._store.remove(document.id, event.version) or changed
            return changed

        if event.kind is EventKind.ADDED:
            # A directory moved into the tree arrives as a single event
            changed = False
            for file_info in walk_root(self.root, self._extension, start=event.path):
                changed = self._load(file_info.path, file_info.relative_path, event.version) or changed
            return changed

        return False

    def _load(self, path: Path, doc_id: str, version: int) -> bool:
        document = self._read(path, doc_id)
        if document is None:
            return self._store.remove(doc_id, version)
        return self._store.upsert(doc_id, document, version)

    def _read(self, path: Path, doc_id: str) -> Document | None:
        """Read and build a document; None if the file cannot be read."""
        try:
            raw = path.read_text(encoding="utf-8")
            mtime = path.stat().st_mtime
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read %s, treating as removed: %s", doc_id, e)
            return None
        return build_document(doc_id, raw, mtime)

    # Index

    def rebuild(self) -> SearchIndex:
        """Rebuild the search index from the current snapshot and publish it."""
        self._dirty_since = None
        documents = self._store.snapshot()
        index = SearchIndex.build(documents, threshold=self._threshold)
        self._index_handle.swap(index)
        self.rebuild_count += 1
        logger.info("Search index rebuilt: %d documents", len(documents))
        return index

    def _mark_dirty(self) -> None:
        if self._dirty_since is None:
            self._dirty_since = time.monotonic()

    # Worker

    def _handle(self, item: object) -> None:
        try:
            if item is _RESCAN:
                self.rescan()
            else:
                self.apply(item)
        except Exception:
            logger.exception("Error applying %s", item)

    def _rebuild_safely(self) -> None:
        try:
            self.rebuild()
        except Exception:
            logger.exception("Error rebuilding search index")

    def _run(self) -> None:
        """Main worker loop - runs in background thread."""
        logger.debug("Sync worker started")

        while True:
            # Block indefinitely while clean, wait out the debounce while dirty
            timeout = self._debounce if self._dirty_since is not None else None
            try:
                item = self._queue.get(timeout=timeout)
            except queue.Empty:
                self._rebuild_safely()
                continue

            if item is _STOP:
                break
            self._handle(item)

            if (
                self._dirty_since is not None
                and time.monotonic() - self._dirty_since >= self._max_rebuild_delay
            ):
                self._rebuild_safely()

        logger.debug("Sync worker stopped")


class RescanScheduler:
    """Requests a periodic full rescan from the synchronizer.

    Covers changes the OS notification queue dropped. The thread is a
    daemon, so it terminates with the main process.
    """

    def __init__(self, synchronizer: Synchronizer, interval: int):
        """
        Args:
            synchronizer: The synchronizer to request rescans from.
            interval: Rescan interval in seconds. Must be > 0.
        """
        if interval <= 0:
            raise ValueError(f"Rescan interval must be positive, got {interval}")

        self._synchronizer = synchronizer
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the background rescan thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Rescan thread already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name="brain-rescan",
            daemon=True,
        )
        self._thread.start()
        logger.info("Rescan scheduler started (interval: %ds)", self._interval)

    def stop(self) -> None:
        """Stop the background rescan thread."""
        if self._thread is None or not self._thread.is_alive():
            return

        self._stop_event.set()
        self._thread.join(timeout=self._interval + 1)
        if self._thread.is_alive():
            logger.warning("Rescan thread did not stop cleanly")
        else:
            logger.info("Rescan scheduler stopped")
        self._thread = None

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            # Sleep first, the startup scan has just run
            if self._stop_event.wait(timeout=self._interval):
                break
            self._synchronizer.request_rescan()
