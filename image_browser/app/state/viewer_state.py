from __future__ import annotations

from PySide6.QtCore import Property, QObject, Signal

from image_browser.app.store import NO_SELECTION, ViewSnapshot
from image_browser.image_engine.decoder import ImageHandle


class ViewerState(QObject):
    """Observable view state bound by the presentation layer."""

    hasSelectionChanged = Signal(bool)
    currentIndexChanged = Signal(int)
    totalChanged = Signal(int)
    zoomPercentChanged = Signal(int)
    currentNameChanged = Signal(str)
    currentImageChanged = Signal(object)
    snapshotChanged = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._has_selection = False
        self._current_index = NO_SELECTION
        self._total = 0
        self._zoom_percent = 100
        self._current_name = ""
        self._current_image: ImageHandle | None = None
        self._snapshot: ViewSnapshot | None = None

    # ---- read-only properties (mutate via controller) ----
    def _get_has_selection(self) -> bool:
        return bool(self._has_selection)

    hasSelection = Property(bool, _get_has_selection, notify=hasSelectionChanged)  # type: ignore[arg-type]

    def _get_current_index(self) -> int:
        return int(self._current_index)

    currentIndex = Property(int, _get_current_index, notify=currentIndexChanged)  # type: ignore[arg-type]

    def _get_total(self) -> int:
        return int(self._total)

    total = Property(int, _get_total, notify=totalChanged)  # type: ignore[arg-type]

    def _get_zoom_percent(self) -> int:
        return int(self._zoom_percent)

    zoomPercent = Property(int, _get_zoom_percent, notify=zoomPercentChanged)  # type: ignore[arg-type]

    def _get_current_name(self) -> str:
        return str(self._current_name)

    currentName = Property(str, _get_current_name, notify=currentNameChanged)  # type: ignore[arg-type]

    @property
    def current_image(self) -> ImageHandle | None:
        return self._current_image

    @property
    def snapshot(self) -> ViewSnapshot | None:
        return self._snapshot

    # ---- internal mutation helper (called by controller) ----
    def _apply_snapshot(self, snap: ViewSnapshot) -> None:
        if snap == self._snapshot:
            return
        self._snapshot = snap

        if snap.has_selection != self._has_selection:
            self._has_selection = snap.has_selection
            self.hasSelectionChanged.emit(snap.has_selection)

        if snap.index != self._current_index:
            self._current_index = snap.index
            self.currentIndexChanged.emit(snap.index)

        if snap.total != self._total:
            self._total = snap.total
            self.totalChanged.emit(snap.total)

        if snap.zoom_percent != self._zoom_percent:
            self._zoom_percent = snap.zoom_percent
            self.zoomPercentChanged.emit(snap.zoom_percent)

        if snap.current_image is not self._current_image:
            self._current_image = snap.current_image
            self.currentImageChanged.emit(snap.current_image)

        name = snap.current_image.name if snap.current_image is not None else ""
        if name != self._current_name:
            self._current_name = name
            self.currentNameChanged.emit(name)

        self.snapshotChanged.emit(snap)
