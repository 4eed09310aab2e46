import logging

import pytest

from axsnap.logger import setup_logging
from axsnap.logging_utils import _log_event, _render_log_kv


@pytest.fixture(autouse=True)
def _restore_axsnap_logger():
    yield
    logger = logging.getLogger("axsnap")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logging.getLogger().setLevel(logging.WARNING)


def test_render_log_kv_skips_none_and_formats_values():
    rendered = _render_log_kv(
        {"event": "x", "ok": True, "missing": None, "error": ValueError("boom")}
    )
    assert rendered == "event=x ok=true error=ValueError(boom)"


def test_log_event_respects_level(caplog):
    logger = logging.getLogger("axsnap.test")
    logger.setLevel(logging.INFO)
    with caplog.at_level(logging.INFO, logger="axsnap.test"):
        _log_event(logger, level=logging.DEBUG, event="hidden")
        _log_event(logger, level=logging.INFO, event="shown", ref="r1")
    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["axsnap event=shown ref=r1"]


def test_setup_logging_verbose_and_file(tmp_path):
    log_path = tmp_path / "axsnap.log"
    logger = setup_logging(log_file_path=log_path, verbose=True)
    assert logger.name == "axsnap"
    assert logger.level == logging.DEBUG
    logger.info("hello file")
    for handler in logger.handlers:
        handler.flush()
    assert "hello file" in log_path.read_text(encoding="utf-8")


def test_setup_logging_from_yaml(tmp_path):
    config = tmp_path / "logging.yaml"
    config.write_text(
        "version: 1\n"
        "disable_existing_loggers: false\n"
        "loggers:\n"
        "  axsnap:\n"
        "    level: WARNING\n",
        encoding="utf-8",
    )
    logger = setup_logging(config_file_path=config)
    assert logger.level == logging.WARNING
