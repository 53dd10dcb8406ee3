import logging

from image_browser import logger as ib_logger


def _stream_handlers(base: logging.Logger) -> list[logging.Handler]:
    return [h for h in base.handlers if type(h) is logging.StreamHandler]


def test_setup_logger_idempotent_handlers():
    """Calling setup_logger() repeatedly should leave exactly one StreamHandler."""
    base = ib_logger.setup_logger(level=logging.DEBUG)
    _ = ib_logger.setup_logger(level=logging.DEBUG)

    assert len(_stream_handlers(base)) == 1
    assert base.propagate is False


def test_env_level_overrides_argument(monkeypatch):
    monkeypatch.setenv("IMAGE_BROWSER_LOG_LEVEL", "warning")
    base = ib_logger.setup_logger(level=logging.DEBUG)
    try:
        assert base.level == logging.WARNING
    finally:
        monkeypatch.delenv("IMAGE_BROWSER_LOG_LEVEL")
        ib_logger.setup_logger()


def test_category_filter_limits_child_loggers(monkeypatch):
    monkeypatch.setenv("IMAGE_BROWSER_LOG_CATS", "loader, store")
    base = ib_logger.setup_logger()
    try:
        (handler,) = _stream_handlers(base)

        def record(name: str) -> logging.LogRecord:
            return logging.LogRecord(name, logging.INFO, __file__, 1, "msg", None, None)

        assert handler.filter(record("image_browser.loader"))
        assert handler.filter(record("image_browser.store"))
        assert not handler.filter(record("image_browser.decoder"))
    finally:
        monkeypatch.delenv("IMAGE_BROWSER_LOG_CATS")
        ib_logger.setup_logger()

    (handler,) = _stream_handlers(base)
    assert handler.filters == []


def test_get_logger_returns_child():
    child = ib_logger.get_logger("loader")
    assert child.name == "image_browser.loader"
    assert ib_logger.get_logger().name == "image_browser"
