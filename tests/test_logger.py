import json
import logging
import uuid

from yt_digest.logging_core.logger import ROOT_LOGGER_NAME, JSONFormatter, get_logger, log_event


def make_record(**extra):
    record = logging.LogRecord("yt_digest", logging.WARNING, __file__, 1, "Channel failed", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_structured_fields():
    record = make_record(
        run_id="run-1",
        channel="catalog-api",
        event_type="failure",
        metadata={"failure_type": "no_tracks"},
    )

    data = json.loads(JSONFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["message"] == "Channel failed"
    assert data["run_id"] == "run-1"
    assert data["channel"] == "catalog-api"
    assert data["event_type"] == "failure"
    assert data["metadata"] == {"failure_type": "no_tracks"}
    assert data["timestamp"].endswith("Z")


def test_formatter_omits_missing_fields():
    data = json.loads(JSONFormatter().format(make_record()))
    assert "channel" not in data
    assert "metadata" not in data


def test_adapter_binds_run_id_and_log_event_passes_extra(monkeypatch):
    run_id = uuid.uuid4()
    logger = get_logger(run_id)
    captured = []
    monkeypatch.setattr(logger.logger, "handle", captured.append)

    log_event(logger, logging.INFO, "Trying channel", channel="internal-api", event_type="start", metadata={"n": 1})

    record = captured[0]
    assert record.run_id == str(run_id)
    assert record.channel == "internal-api"
    assert record.event_type == "start"
    assert record.metadata == {"n": 1}


def test_log_lines_go_to_stderr(monkeypatch, capsys):
    monkeypatch.setattr(logging.getLogger(ROOT_LOGGER_NAME), "handlers", [])

    log_event(get_logger(), logging.INFO, "Trying channel", event_type="start")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err.strip())["message"] == "Trying channel"
