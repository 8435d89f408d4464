"""Unit tests for the Decision Log and its sinks."""
import io
import logging
import re
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from hostcore.observer.events import LogEntry, Severity
from hostcore.observer.journal import DecisionLog, run_log_path
from hostcore.observer.sinks import ConsoleSink, FileSink

from fakes import ListSink

LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] \[(INFO|WARNING|ERROR|SUCCESS|SIMULATED)\] .+$")


def test_entries_keep_call_order(journal, live_sink):
    journal.info("one")
    journal.warning("two")
    journal.simulated("three")
    journal.error("four")
    journal.success("five")

    assert [e.message for e in journal.entries] == ["one", "two", "three", "four", "five"]
    assert [e.message for e in live_sink.entries] == ["one", "two", "three", "four", "five"]
    assert [e.severity for e in journal.entries] == [
        Severity.INFO, Severity.WARNING, Severity.SIMULATED, Severity.ERROR, Severity.SUCCESS,
    ]


def test_durable_file_matches_line_format(journal):
    journal.info("Audit started")
    journal.warning("Disk C:\\: 8.0% free")

    lines = journal.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert all(LINE.match(line) for line in lines)
    assert lines[0].endswith("[INFO] Audit started")
    assert lines[1].endswith("[WARNING] Disk C:\\: 8.0% free")


def test_log_directory_created_on_first_write(tmp_path):
    log = DecisionLog.for_run(tmp_path / "nested" / "logs", datetime(2026, 3, 4, 5, 6, 7), live=ListSink())
    assert not (tmp_path / "nested").exists()

    log.info("hello")

    assert log.path == tmp_path / "nested" / "logs" / "hostforge_20260304_050607.log"
    assert log.path.exists()


def test_run_log_path_uses_prefix_and_start_time(tmp_path):
    path = run_log_path(tmp_path, datetime(2026, 1, 2, 3, 4, 5), prefix="maint")
    assert path.name == "maint_20260102_030405.log"


@pytest.mark.parametrize(
    "failure",
    [
        OSError("disk full"),
        UnicodeEncodeError("utf-8", "\udcff", 0, 1, "surrogates not allowed"),
        ValueError("I/O operation on closed file"),
    ],
)
def test_durable_failure_is_swallowed_and_warned_once(caplog, failure):
    live = ListSink()
    durable = MagicMock(spec=FileSink)
    durable.path = "unwritable.log"
    durable.write.side_effect = failure
    log = DecisionLog(live=live, durable=durable)

    with caplog.at_level(logging.WARNING, logger="observer.journal"):
        log.info("first")
        log.error("second")

    # Live sink stays authoritative
    assert [e.message for e in live.entries] == ["first", "second"]
    assert durable.write.call_count == 2
    warnings = [r for r in caplog.records if "not persisted" in r.getMessage()]
    assert len(warnings) == 1


def test_undecodable_message_still_persisted(tmp_path):
    log = DecisionLog(live=ListSink(), durable=FileSink(tmp_path / "run.log"))

    log.warning("rename C:\\Windows\\bad\udcff failed")
    log.info("next")

    lines = (tmp_path / "run.log").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("[WARNING] rename C:\\Windows\\bad\\udcff failed")


def test_log_without_durable_sink_has_no_path():
    log = DecisionLog(live=ListSink())
    log.info("only on screen")
    assert log.path is None
    assert len(log.entries) == 1


def test_console_sink_colors_by_severity():
    stream = io.StringIO()
    sink = ConsoleSink(stream=stream, color=True)
    sink.write(LogEntry(Severity.ERROR, "boom"))
    out = stream.getvalue()
    assert "\x1b[31m" in out
    assert "[ERROR] boom" in out


def test_console_sink_plain_when_color_disabled():
    stream = io.StringIO()
    ConsoleSink(stream=stream, color=False).write(LogEntry(Severity.SIMULATED, "Would run sfc"))
    assert "\x1b[" not in stream.getvalue()
    assert LINE.match(stream.getvalue().strip())
