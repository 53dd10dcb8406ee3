import json
import os

import pytest

pytest.importorskip("PySide6")

from image_browser.app.controller import ViewController
from image_browser.app.store import ImageCollectionStore
from image_browser.image_engine.loader import BatchOutcome
from image_browser.main import ImageBrowserWindow, _apply_cli_logging_options, _image_paths
from image_browser.settings_manager import SettingsManager


@pytest.fixture
def window(qtbot, tmp_path, loader):
    settings = SettingsManager(str(tmp_path / "settings.json"))
    controller = ViewController(ImageCollectionStore(loader))
    win = ImageBrowserWindow(settings=settings, controller=controller)
    qtbot.addWidget(win)
    return win


def test_empty_window_hides_navigation_and_zoom(window):
    assert window.prev_button.isHidden()
    assert window.next_button.isHidden()
    assert window.zoom_controls.isHidden()
    assert window.pages.currentWidget() is window.empty_label
    assert window.position_label.text() == ""


def test_open_paths_shows_first_image(qtbot, window, tmp_path):
    img = tmp_path / "a.png"
    img.write_bytes(b"\x05")
    txt = tmp_path / "readme.txt"
    txt.write_text("hello", encoding="utf-8")

    with qtbot.waitSignal(window.controller.batch_ingested, timeout=5000):
        window.open_paths([str(img), str(txt)])

    assert not window.prev_button.isHidden()
    assert not window.zoom_controls.isHidden()
    assert window.pages.currentWidget() is window.scroll
    assert "Image 1 / 1" in window.position_label.text()
    assert window.zoom_label.text() == "100%"
    assert not window.image_label.pixmap().isNull()
    assert "Added 1 image(s)" in window.statusBar().currentMessage()


def test_zoom_buttons_update_label(qtbot, window, tmp_path):
    img = tmp_path / "a.png"
    img.write_bytes(b"\x05")
    with qtbot.waitSignal(window.controller.batch_ingested, timeout=5000):
        window.open_paths([str(img)])

    window.zoom_in_button.click()
    window.zoom_in_button.click()
    assert window.zoom_label.text() == "140%"
    window.zoom_reset_button.click()
    assert window.zoom_label.text() == "100%"


def test_failed_files_reported_in_status_bar(qtbot, window, tmp_path):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"bad")
    with qtbot.waitSignal(window.controller.batch_ingested, timeout=5000):
        window.open_paths([str(bad)])

    assert "1 failed: bad.png" in window.statusBar().currentMessage()
    assert window.pages.currentWidget() is window.empty_label


def test_cli_logging_options_are_stripped(monkeypatch):
    monkeypatch.delenv("IMAGE_BROWSER_LOG_LEVEL", raising=False)
    argv = _apply_cli_logging_options(["prog", "--log-level", "debug", "a.png"])
    assert argv == ["prog", "a.png"]
    assert os.environ["IMAGE_BROWSER_LOG_LEVEL"] == "debug"
    monkeypatch.delenv("IMAGE_BROWSER_LOG_LEVEL")


def test_window_builds_pipeline_from_settings(qtbot, tmp_path, make_handle):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"zoom_step_percent": 10, "decode_workers": 2}), encoding="utf-8")
    settings = SettingsManager(str(path))
    win = ImageBrowserWindow(settings=settings)
    qtbot.addWidget(win)
    try:
        assert win.controller.store.loader._max_workers == settings.decode_workers == 2

        win.controller.store.commit_batch(BatchOutcome(1, (make_handle("a.png"),)))
        win.zoom_in_button.click()
        assert win.zoom_label.text() == "110%"
    finally:
        win.controller.shutdown()


def test_image_paths_keep_only_existing_files(tmp_path):
    img = tmp_path / "a.png"
    img.write_bytes(b"\x05")
    missing = tmp_path / "missing.png"

    paths = _image_paths(["prog", "offscreen", str(img), str(missing), "--flag"])
    assert paths == [str(img)]
