import io
import logging
from contextlib import contextmanager, redirect_stdout
from pathlib import Path
from unittest.mock import patch

import pytest
from osgeo import gdal

from seiscube.base.config import ColorFormatter, LoggerManager


@contextmanager
def isolated_root_logging():
    """
    Temporarily isolate root logger handlers and level so tests don't
    interfere with each other or the global test suite.
    """
    root = logging.getLogger()
    old_level = root.level
    old_handlers = list(root.handlers)
    try:
        for h in list(root.handlers):
            root.removeHandler(h)
        yield root
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in old_handlers:
            root.addHandler(h)
        root.setLevel(old_level)


def test_console_logging_colored_and_message(capsys):
    with isolated_root_logging():
        LoggerManager(level="INFO")

        out = capsys.readouterr()
        stderr_text = out.err
        assert "\x1b[" in stderr_text
        assert "Logging is configured." in stderr_text
        assert "seiscube.base.config" in stderr_text

        logging.getLogger(__name__).info("hello world")
        out2 = capsys.readouterr()
        assert "hello world" in out2.err
        assert "\x1b[" in out2.err


def test_file_logging_no_colors_and_writes(tmp_path: Path):
    log_file = tmp_path / "test.log"
    with isolated_root_logging():
        LoggerManager(level=logging.DEBUG, log_file=log_file)
        logging.getLogger("tests.config.test_logger").debug("file handler check")

    text = log_file.read_text(encoding="utf-8")
    assert "Logging is configured." in text
    assert "file handler check" in text
    assert "\x1b[" not in text


def test_idempotent_handlers(tmp_path: Path):
    log_file = tmp_path / "dup.log"
    with isolated_root_logging() as root:
        LoggerManager(level="INFO", log_file=log_file)
        LoggerManager(level="INFO", log_file=log_file)

        stream_handlers = [
            h
            for h in root.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        assert len(stream_handlers) == 1
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == log_file


def test_noisy_loggers_are_quietened():
    with isolated_root_logging():
        LoggerManager(level="DEBUG")
        for name in LoggerManager.NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


def test_color_formatter_keeps_record_untouched():
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "msg", None, None)
    text = ColorFormatter("%(levelname)s %(message)s").format(record)
    assert text == "\x1b[31mERROR\x1b[0m msg"
    assert record.levelname == "ERROR"


@patch("osgeo.gdal.PushErrorHandler")
def test_set_error_handler_prints_for_low_error_class(mock_push):
    LoggerManager()
    handler = mock_push.call_args[0][0]

    buf = io.StringIO()
    with redirect_stdout(buf):
        handler(0, 42, "oops")
    out = buf.getvalue().strip()

    assert out == "GDAL error (class 0, number 42): oops"


@patch("osgeo.gdal.PushErrorHandler")
def test_set_error_handler_logs_severities(mock_push, capsys):
    with isolated_root_logging():
        LoggerManager(level="DEBUG")
        handler = mock_push.call_args[0][0]

        handler(gdal.CE_Warning, 22, "warn msg")
        handler(gdal.CE_Failure, 33, "fail msg")
        handler(gdal.CE_Fatal, 44, "fatal msg")
        # unknown class falls back to ERROR
        handler(999, 55, "unknown class msg")

        err_text = capsys.readouterr().err
        assert "seiscube.base.config.gdal | GDAL[22] warn msg" in err_text
        assert "seiscube.base.config.gdal | GDAL[33] fail msg" in err_text
        assert "seiscube.base.config.gdal | GDAL[44] fatal msg" in err_text
        assert (
            "seiscube.base.config.gdal | GDAL(class=999, code=55) unknown class msg"
            in err_text
        )


def test_setup_logging_invalid_level_string_raises():
    with isolated_root_logging():
        with pytest.raises(ValueError):
            LoggerManager(level="NOT_A_LEVEL")
