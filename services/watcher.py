"""Watch mode — rebuild a collection snapshot whenever its content changes.

Each rebuild produces a brand new Collection that replaces the previous one
in a single assignment. A failed rebuild keeps the last good snapshot.
"""

import logging
import os
import threading
from datetime import datetime

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from config import CONTENT_EXTENSIONS
from services.errors import IO, BuildFailed, ContentRootError, ValidationError
from services.pipeline import BuildResult, build_collection
from services.report import FAIL_FAST

log = logging.getLogger(__name__)


class _ContentEventHandler(FileSystemEventHandler):
    def __init__(self, watcher: "CollectionWatcher"):
        self._watcher = watcher

    def on_any_event(self, event):
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(self._watcher.is_content_path(p) for p in paths if p):
            self._watcher.schedule_rebuild()


class CollectionWatcher:
    def __init__(
        self,
        root: str,
        schema,
        mode: str = FAIL_FAST,
        workers: int = 4,
        extensions=CONTENT_EXTENSIONS,
        debounce_seconds: float = 0.5,
        on_rebuild=None,
    ):
        self.root = root
        self.schema = schema
        self.mode = mode
        self.workers = workers
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.debounce_seconds = debounce_seconds
        self._on_rebuild = on_rebuild
        self._result: BuildResult | None = None
        self._last_errors = []
        self._last_built = None
        self._timer = None
        self._observer = None
        self._lock = threading.Lock()
        self._build_lock = threading.Lock()

    def is_content_path(self, path: str) -> bool:
        name = os.path.basename(path)
        return not name.startswith(".") and os.path.splitext(name)[1].lower() in self.extensions

    @property
    def current(self) -> BuildResult | None:
        """Last successfully published snapshot."""
        with self._lock:
            return self._result

    def rebuild(self) -> bool:
        """Run the pipeline once and swap in the new snapshot. Returns True on success."""
        with self._build_lock:
            try:
                result = build_collection(
                    self.root,
                    self.schema,
                    mode=self.mode,
                    workers=self.workers,
                    extensions=self.extensions,
                )
            except BuildFailed as e:
                log.warning(
                    "Rebuild failed with %d error(s); keeping previous snapshot", len(e.errors)
                )
                with self._lock:
                    self._last_errors = e.errors
                self._notify(None, e.errors)
                return False
            except ContentRootError as e:
                log.warning("Rebuild failed: %s", e)
                errors = [ValidationError(self.root, None, str(e), IO)]
                with self._lock:
                    self._last_errors = errors
                self._notify(None, errors)
                return False

            with self._lock:
                self._result = result
                self._last_errors = result.errors
                self._last_built = datetime.now().isoformat()
            self._notify(result, result.errors)
            return True

    def _notify(self, result, errors) -> None:
        if self._on_rebuild:
            self._on_rebuild(result, errors)

    def schedule_rebuild(self) -> None:
        """Debounce bursts of file events into one rebuild."""
        with self._lock:
            if self._timer:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.rebuild)
            self._timer.daemon = True
            self._timer.start()

    def start(self) -> None:
        self.rebuild()
        observer = Observer()
        observer.schedule(_ContentEventHandler(self), self.root, recursive=True)
        observer.daemon = True
        observer.start()
        self._observer = observer
        log.info("Watching %s for changes", self.root)

    def stop(self) -> None:
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    @property
    def status(self) -> dict:
        with self._lock:
            return {
                "root": self.root,
                "schema": self.schema.name,
                "watching": self._observer is not None,
                "last_built": self._last_built,
                "records": len(self._result.collection) if self._result else 0,
                "errors": len(self._last_errors),
            }
