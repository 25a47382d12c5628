"""Filesystem watcher that turns OS notifications into document events."""

from __future__ import annotations

import enum
import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


class EventKind(enum.Enum):
    ADDED = "added"
    CHANGED = "changed"
    REMOVED = "removed"


@dataclass(frozen=True)
class FileEvent:
    """A change to a path under the docs root.

    ``version`` is assigned on arrival from a monotonic counter and orders
    events for the same document by recency.
    """

    kind: EventKind
    path: Path
    version: int
    is_directory: bool = False


EventCallback = Callable[[EventKind, Path, bool], None]


class DocumentEventHandler(FileSystemEventHandler):
    """Forward watchdog events to a callback as (kind, path, is_directory)."""

    def __init__(self, callback: EventCallback) -> None:
        super().__init__()
        self._callback = callback

    def on_created(self, event: FileSystemEvent) -> None:
        self._callback(EventKind.ADDED, _path(event.src_path), event.is_directory)

    def on_modified(self, event: FileSystemEvent) -> None:
        # Directory mtime changes carry no document content
        if not event.is_directory:
            self._callback(EventKind.CHANGED, _path(event.src_path), False)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._callback(EventKind.REMOVED, _path(event.src_path), event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._callback(EventKind.REMOVED, _path(event.src_path), event.is_directory)
        self._callback(EventKind.ADDED, _path(event.dest_path), event.is_directory)


def _path(raw: str | bytes) -> Path:
    return Path(os.fsdecode(raw))


class Watcher:
    """Recursive watch on one directory, backed by a watchdog observer."""

    def __init__(self, root: Path, callback: EventCallback) -> None:
        self.root = root
        self._handler = DocumentEventHandler(callback)
        self._observer: BaseObserver | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        with self._lock:
            if self._observer is not None:
                return
            observer = Observer()
            observer.schedule(self._handler, str(self.root), recursive=True)
            observer.daemon = True
            observer.start()
            self._observer = observer
        logger.info("Watching %s for changes", self.root)

    def stop(self) -> None:
        """Stop the observer and release its OS watch handles."""
        with self._lock:
            observer = self._observer
            self._observer = None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=5)
        if observer.is_alive():
            logger.warning("Watcher thread did not stop cleanly")
        else:
            logger.info("Stopped watching %s", self.root)


__all__ = ["DocumentEventHandler", "EventCallback", "EventKind", "FileEvent", "Watcher"]
