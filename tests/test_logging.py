import json
import logging

import pytest

from qrbridge.logging import AUDIT, JsonFormatter, audit, get_logger, setup_logging, trace


@trace(logger_name="tests")
def _double(x):
    return x * 2


@trace(logger_name="tests")
def _explode():
    raise RuntimeError("boom")


@pytest.fixture
def restore_root():
    root = logging.getLogger("qrbridge")
    level, handlers = root.level, list(root.handlers)
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_loggers_are_namespaced():
    assert get_logger("codec").name == "qrbridge.codec"


def test_audit_records_event_and_context(qrbridge_logs):
    audit("qr.saved", logger=get_logger("tests"), target="x.jpg")

    record = qrbridge_logs.records[-1]
    assert record.levelno == AUDIT
    assert record.event == "qr.saved"
    assert record.ctx == {"target": "x.jpg"}


def test_trace_logs_entry_and_exit(qrbridge_logs):
    assert _double(21) == 42

    events = [getattr(r, "event", None) for r in qrbridge_logs.records]
    assert "_double.enter" in events
    assert "_double.done" in events
    done = next(r for r in qrbridge_logs.records if getattr(r, "event", None) == "_double.done")
    assert done.ctx == {"result": "42"}
    assert done.duration_ms >= 0


def test_trace_logs_and_reraises_errors(qrbridge_logs):
    with pytest.raises(RuntimeError, match="boom"):
        _explode()

    errors = [r for r in qrbridge_logs.records if r.levelno == logging.ERROR]
    assert errors[-1].event == "_explode.error"
    assert errors[-1].exc_info[0] is RuntimeError


def test_trace_summarizes_images(qrbridge_logs):
    from PIL import Image

    from qrbridge.raster import rasterize
    from qrbridge.matrix import BitMatrix

    rasterize(BitMatrix([[True]]))
    enter = next(r for r in qrbridge_logs.records if getattr(r, "event", None) == "rasterize.enter")
    assert enter.ctx["args"] == ["<BitMatrix 1x1>"]
    done = next(r for r in qrbridge_logs.records if getattr(r, "event", None) == "rasterize.done")
    assert done.ctx["result"] == f"<{Image.Image.__name__} 1x1>"


def test_json_formatter_emits_one_object():
    log = get_logger("tests")
    record = log.makeRecord(log.name, AUDIT, "", 0, "", (), None)
    record.event = "qr.decoded"
    record.ctx = {"data": "hello"}

    entry = json.loads(JsonFormatter().format(record))
    assert entry["level"] == "AUDIT"
    assert entry["event"] == "qr.decoded"
    assert entry["ctx"] == {"data": "hello"}


def test_setup_logging_writes_json_file(tmp_path, restore_root):
    log_file = tmp_path / "qr.log"
    setup_logging(level="DEBUG", log_file=str(log_file))
    audit("qr.saved", logger=get_logger("tests"), target="out.jpg")
    for handler in restore_root.handlers:
        handler.flush()

    lines = log_file.read_text().splitlines()
    assert json.loads(lines[-1])["event"] == "qr.saved"
    assert restore_root.level == logging.DEBUG
