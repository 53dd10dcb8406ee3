import os
import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths, Qt, Slot
from PySide6.QtGui import QAction, QKeySequence, QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from image_browser.app.controller import ViewController
from image_browser.app.store import BatchResult, ImageCollectionStore, ViewSnapshot
from image_browser.image_engine.loader import BatchLoader
from image_browser.file_blobs import load_file_blobs
from image_browser.logger import get_logger, setup_logger
from image_browser.settings_manager import SettingsManager

# --- CLI logging options -----------------------------------------------------
# Qt exits on unknown options, so our own options are parsed first, reflected
# in environment variables (IMAGE_BROWSER_LOG_LEVEL, IMAGE_BROWSER_LOG_CATS)
# and removed from argv.


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    import argparse

    parser = argparse.ArgumentParser(description="Image Browser", add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv[1:])
    if args.log_level:
        os.environ["IMAGE_BROWSER_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["IMAGE_BROWSER_LOG_CATS"] = args.log_cats
    return [argv[0], *remaining]


logger = get_logger("main")

IMAGE_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp *.tif *.tiff *.avif *.heic);;All files (*)"


def default_settings_path() -> str:
    app_cfg = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppConfigLocation)
    base = Path(app_cfg) / "image_browser" if app_cfg else Path.home() / ".image_browser"
    return (base / "settings.json").as_posix()


class ImageBrowserWindow(QMainWindow):
    def __init__(self, settings: SettingsManager | None = None, controller: ViewController | None = None):
        super().__init__()
        self.setWindowTitle("Image Browser")
        self.setAcceptDrops(True)
        self.resize(1100, 800)

        self._settings_manager = settings if settings is not None else SettingsManager(default_settings_path())
        if controller is None:
            loader = BatchLoader(max_workers=self._settings_manager.decode_workers)
            store = ImageCollectionStore(loader, self._settings_manager.zoom_range())
            controller = ViewController(store)
        self.controller = controller
        self.controller.setParent(self)

        self._build_ui()
        self._build_actions()

        state = self.controller.viewer_state
        state.snapshotChanged.connect(self._render)
        self.controller.batch_ingested.connect(self._on_batch_ingested)
        self._render(self.controller.snapshot())

    # ---- layout ------------------------------------------------------------
    def _build_ui(self) -> None:
        root = QWidget(self)
        layout = QVBoxLayout(root)

        controls = QHBoxLayout()
        self.open_button = QPushButton("Select images", root)
        self.prev_button = QPushButton("Previous", root)
        self.next_button = QPushButton("Next", root)
        controls.addStretch(1)
        for button in (self.open_button, self.prev_button, self.next_button):
            controls.addWidget(button)
        controls.addStretch(1)
        layout.addLayout(controls)

        zoom_row = QHBoxLayout()
        self.zoom_out_button = QPushButton("-", root)
        self.zoom_reset_button = QPushButton("Reset", root)
        self.zoom_in_button = QPushButton("+", root)
        self.zoom_label = QLabel(root)
        zoom_row.addStretch(1)
        for w in (self.zoom_out_button, self.zoom_reset_button, self.zoom_in_button, self.zoom_label):
            zoom_row.addWidget(w)
        zoom_row.addStretch(1)
        self.zoom_controls = QWidget(root)
        self.zoom_controls.setLayout(zoom_row)
        layout.addWidget(self.zoom_controls)

        self.pages = QStackedWidget(root)
        self.empty_label = QLabel("Select images, or drop image files here", self.pages)
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.image_label = QLabel()
        self.image_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.scroll = QScrollArea(self.pages)
        self.scroll.setWidget(self.image_label)
        self.scroll.setWidgetResizable(True)
        self.scroll.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.pages.addWidget(self.empty_label)
        self.pages.addWidget(self.scroll)
        layout.addWidget(self.pages, 1)

        self.position_label = QLabel(root)
        self.position_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.position_label)

        self.setCentralWidget(root)
        color = self._settings_manager.background_color()
        self.scroll.setStyleSheet(f"background-color: {color.name()};")

        self.open_button.clicked.connect(self.open_file_dialog)
        self.prev_button.clicked.connect(self.controller.previous)
        self.next_button.clicked.connect(self.controller.next)
        self.zoom_out_button.clicked.connect(self.controller.zoom_out)
        self.zoom_reset_button.clicked.connect(self.controller.reset_zoom)
        self.zoom_in_button.clicked.connect(self.controller.zoom_in)

    def _build_actions(self) -> None:
        bindings = [
            ("Open", QKeySequence.StandardKey.Open, self.open_file_dialog),
            ("Previous", "Left", self.controller.previous),
            ("Next", "Right", self.controller.next),
            ("Zoom in", "+", self.controller.zoom_in),
            ("Zoom in", "=", self.controller.zoom_in),
            ("Zoom out", "-", self.controller.zoom_out),
            ("Reset zoom", "0", self.controller.reset_zoom),
        ]
        for text, key, slot in bindings:
            action = QAction(text, self)
            action.setShortcut(QKeySequence(key))
            action.triggered.connect(slot)
            self.addAction(action)

    # ---- ingestion -----------------------------------------------------------
    @Slot()
    def open_file_dialog(self) -> None:
        start_dir = self._settings_manager.last_open_dir or str(Path.home())
        paths, _ = QFileDialog.getOpenFileNames(self, "Select images", start_dir, IMAGE_FILE_FILTER)
        if paths:
            self._settings_manager.set("last_open_dir", paths[0])
            self.open_paths(paths)

    def open_paths(self, paths: list[str]) -> int | None:
        blobs = load_file_blobs(paths)
        logger.debug("open_paths: requested=%s readable=%s", len(paths), len(blobs))
        if not blobs:
            self.statusBar().showMessage("No readable files selected", 5000)
            return None
        self.statusBar().showMessage(f"Loading {len(blobs)} file(s)...")
        return self.controller.ingest_files(blobs)

    def dragEnterEvent(self, event) -> None:  # noqa: N802
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event) -> None:  # noqa: N802
        paths = [u.toLocalFile() for u in event.mimeData().urls() if u.isLocalFile()]
        if paths:
            self.open_paths(paths)
            event.acceptProposedAction()

    @Slot(object)
    def _on_batch_ingested(self, result: BatchResult) -> None:
        msg = f"Added {result.appended} image(s)"
        if result.failures:
            msg += f", {len(result.failures)} failed: " + ", ".join(f.name for f in result.failures)
        self.statusBar().showMessage(msg, 8000)

    # ---- rendering -----------------------------------------------------------
    @Slot(object)
    def _render(self, snap: ViewSnapshot) -> None:
        has_images = snap.total > 0
        self.prev_button.setVisible(has_images)
        self.next_button.setVisible(has_images)
        self.zoom_controls.setVisible(snap.has_selection)
        self.zoom_label.setText(f"{snap.zoom_percent}%")

        position, zoom = self.controller.status_text()
        self.position_label.setText(f"{position}    {zoom}" if position else "")

        if snap.current_image is None:
            self.pages.setCurrentWidget(self.empty_label)
            self.image_label.clear()
            return

        self.pages.setCurrentWidget(self.scroll)
        pix = QPixmap.fromImage(snap.current_image.to_qimage())
        w = max(1, round(pix.width() * snap.zoom_factor))
        h = max(1, round(pix.height() * snap.zoom_factor))
        self.image_label.setPixmap(
            pix.scaled(w, h, Qt.AspectRatioMode.KeepAspectRatio, Qt.TransformationMode.SmoothTransformation)
        )

    def closeEvent(self, event) -> None:  # noqa: N802
        self.controller.shutdown()
        super().closeEvent(event)


def _image_paths(arguments: list[str]) -> list[str]:
    """Positional arguments left over after Qt has taken its own options.

    Only existing files are kept, so a stray option value is never opened as an image.
    """
    import argparse

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("paths", nargs="*", help="Image files to open")
    args, unknown = parser.parse_known_args(arguments[1:])
    if unknown:
        logger.debug("ignoring unrecognized arguments: %s", unknown)
    paths = [p for p in args.paths if Path(p).is_file()]
    if len(paths) != len(args.paths):
        logger.debug("ignoring non-file arguments: %s", [p for p in args.paths if p not in paths])
    return paths


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint (packaging-friendly)."""
    if argv is None:
        argv = sys.argv
    argv = _apply_cli_logging_options(list(argv))
    setup_logger()

    app = QApplication(argv)
    paths = _image_paths(app.arguments())
    window = ImageBrowserWindow()
    if paths:
        window.open_paths(paths)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(run())
