import json
import logging

import pytest

from smb_profitsight.logging_config import JsonFormatter, parse_level, setup_logging


@pytest.fixture
def clean_loggers(monkeypatch):
    """Give the root and report loggers empty handler lists for one test."""
    root = logging.getLogger()
    report = logging.getLogger("smb_profitsight.report")
    levels = (root.level, report.level)
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(report, "handlers", [])
    yield root, report
    for handler in root.handlers + report.handlers:
        handler.close()
    root.setLevel(levels[0])
    report.setLevel(levels[1])


def _json_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_parse_level():
    assert parse_level("debug") == logging.DEBUG
    assert parse_level("WARNING") == logging.WARNING
    with pytest.raises(ValueError, match="Unknown log level"):
        parse_level("chatty")


def test_json_formatter_writes_one_object_per_record():
    record = logging.LogRecord(
        name="smb_profitsight.report",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Computed %d rows",
        args=(3,),
        exc_info=None,
    )
    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "smb_profitsight.report"
    assert payload["message"] == "Computed 3 rows"
    assert "exception" not in payload


def test_setup_logging_writes_json_files(tmp_path, clean_loggers):
    logs = tmp_path / "logs"
    setup_logging(logs)

    logging.getLogger("smb_profitsight.report").info("report computed")
    logging.getLogger("smb_profitsight.db").error("import failed")

    app = _json_lines(logs / "app.log")
    assert [entry["message"] for entry in app] == ["report computed", "import failed"]

    reports = _json_lines(logs / "reports.log")
    assert len(reports) == 1
    assert reports[0]["logger"] == "smb_profitsight.report"

    errors = _json_lines(logs / "errors.log")
    assert [entry["level"] for entry in errors] == ["ERROR"]


def test_setup_logging_is_idempotent(tmp_path, clean_loggers):
    root, report = clean_loggers
    setup_logging(tmp_path)
    setup_logging(tmp_path)

    assert len(root.handlers) == 2
    assert len(report.handlers) == 1


def test_existing_root_handler_keeps_report_log(tmp_path, clean_loggers):
    root, report = clean_loggers
    existing = logging.NullHandler()
    root.addHandler(existing)

    setup_logging(tmp_path, logging.DEBUG)
    report.debug("filtered sales")

    assert root.handlers == [existing]
    assert not (tmp_path / "app.log").exists()
    assert _json_lines(tmp_path / "reports.log")[0]["message"] == "filtered sales"
