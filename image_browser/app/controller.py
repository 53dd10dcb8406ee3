"""Translate user intents into store operations.

The controller is the only writer of the store. After every mutation it
pushes a fresh snapshot into ``ViewerState`` for the presentation layer.
"""

from __future__ import annotations

from collections.abc import Iterable

from PySide6.QtCore import QObject, Signal, Slot

from image_browser.app.state.viewer_state import ViewerState
from image_browser.app.store import BatchResult, ImageCollectionStore, ViewSnapshot
from image_browser.image_engine.decoder import FileBlob
from image_browser.logger import get_logger

_logger = get_logger("controller")


class ViewController(QObject):
    batch_ingested = Signal(object)  # BatchResult

    def __init__(self, store: ImageCollectionStore | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._store = store if store is not None else ImageCollectionStore(parent=self)
        self.viewer_state = ViewerState(self)
        self._store.changed.connect(self._publish)
        self._store.batch_ingested.connect(self._on_batch_ingested)
        self._publish()

    @property
    def store(self) -> ImageCollectionStore:
        return self._store

    def snapshot(self) -> ViewSnapshot:
        return self._store.snapshot()

    # ---- intents ----------------------------------------------------------------
    def ingest_files(self, blobs: Iterable[FileBlob]) -> int:
        blobs = list(blobs)
        batch_id = self._store.ingest_batch(blobs)
        _logger.debug("ingest_files: batch=%s files=%s", batch_id, len(blobs))
        return batch_id

    def next(self) -> None:
        self._store.select_next()

    def previous(self) -> None:
        self._store.select_previous()

    # Zoom intents without a current image are no-ops inside the store.
    def zoom_in(self) -> None:
        self._store.zoom_in()

    def zoom_out(self) -> None:
        self._store.zoom_out()

    def reset_zoom(self) -> None:
        self._store.reset_zoom()

    def status_text(self) -> tuple[str, str]:
        """Footer lines: position in the collection and the zoom level."""
        snap = self._store.snapshot()
        position = f"Image {snap.index + 1} / {snap.total}" if snap.has_selection else ""
        return position, f"Zoom: {snap.zoom_percent}%"

    def shutdown(self) -> None:
        self._store.shutdown()

    # ---- store notifications ---------------------------------------------------
    @Slot()
    def _publish(self) -> None:
        self.viewer_state._apply_snapshot(self._store.snapshot())

    @Slot(object)
    def _on_batch_ingested(self, result: BatchResult) -> None:
        self.batch_ingested.emit(result)
