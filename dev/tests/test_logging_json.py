import json
import logging
import sys

from game_chooser.logging_config import JsonFormatter


def test_json_formatter_outputs_expected_fields():
    record = logging.LogRecord(
        name="game_chooser.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=123,
        msg="hello",
        args=(),
        exc_info=None,
    )

    formatter = JsonFormatter()
    payload = json.loads(formatter.format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "game_chooser.test"
    assert payload["message"] == "hello"
    assert payload["lineno"] == 123
    assert "timestamp" in payload
    assert "thread" in payload


def test_json_formatter_includes_diagnostic_and_exc_info():
    formatter = JsonFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            name="game_chooser.test",
            level=logging.ERROR,
            pathname=__file__,
            lineno=55,
            msg="failed",
            args=(),
            exc_info=sys.exc_info(),
        )
    record.diagnostic = {"kind": "corrupt_archive", "source": "/maps/a.zip"}

    payload = json.loads(formatter.format(record))
    assert "ValueError" in payload["exc_info"]
    assert payload["diagnostic"]["kind"] == "corrupt_archive"


def test_diagnostics_are_logged_with_structured_extra(caplog):
    from game_chooser.scanning.diagnostics import DiagnosticKind, ScanDiagnostics

    seen = []
    diagnostics = ScanDiagnostics(on_report=seen.append)
    with caplog.at_level(logging.INFO, logger="game_chooser"):
        diagnostics.report(DiagnosticKind.MALFORMED_DESCRIPTOR, "file:///a.xml", "bad", line=3, column=1)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.diagnostic["line"] == 3
    assert "line:3 column:1" in record.getMessage()
    assert seen[0].kind is DiagnosticKind.MALFORMED_DESCRIPTOR


def test_setup_logging_writes_files(tmp_path):
    from game_chooser.logging_config import cleanup_logging, setup_logging

    try:
        result = setup_logging(log_level="DEBUG", log_dir=tmp_path, enable_console_logging=False)
        logging.getLogger("game_chooser.test").warning("written")
        for handler in result["handlers"].values():
            handler.flush()
        assert "written" in (tmp_path / "game_chooser.log").read_text(encoding="utf-8")
        assert "written" in (tmp_path / "errors.log").read_text(encoding="utf-8")
    finally:
        cleanup_logging()
