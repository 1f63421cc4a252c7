import logging
from pathlib import Path

import pytest

from strategy_fetcher.ingest.parser import (
    LineOutcome,
    RecordType,
    classify_line,
    handle_line,
    parse_file,
)
from strategy_fetcher.ingest.report import ScanReport
from strategy_fetcher.model import AccountSet


def _write_log(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "line, expected",
    [
        ("INFO|ACC1|TICK1|STRAT1", RecordType.INFO),
        ("DAILY|01/06/2024|1|2|3|4|5|6", RecordType.DAILY),
        ("LONG_ENTRY|01/06/2024|930|1|10|1|10", RecordType.TRADE),
        ("SHORT_LONG|01/06/2024|930|1|10|1|10", RecordType.TRADE),
        ("FOO|x|y", None),
        ("info|ACC1|TICK1|STRAT1", None),
    ],
)
def test_classify_line(line, expected):
    record_type, tokens = classify_line(line)

    assert record_type is expected
    assert tokens == line.split("|")


def test_unknown_tag_is_logged_once_and_ignored(caplog):
    account_set = AccountSet()
    handle_line(account_set, "INFO|ACC1|TICK1|STRAT1")
    caplog.clear()

    with caplog.at_level(logging.WARNING):
        outcome = handle_line(account_set, "FOO|x|y")

    assert outcome is LineOutcome.DROPPED
    assert len(caplog.records) == 1
    assert "FOO" in caplog.records[0].getMessage()
    strategy = account_set.accounts["ACC1"].strategies["STRAT1"]
    assert strategy.daily_info == {}
    assert strategy.trade_info == []


def test_record_before_info_is_dropped(caplog):
    account_set = AccountSet()

    with caplog.at_level(logging.WARNING):
        outcome = handle_line(account_set, "DAILY|01/06/2024|100|50|3|5|1100|1000")

    assert outcome is LineOutcome.DROPPED
    assert account_set.accounts == {}
    assert "before any INFO record" in caplog.text


def test_truncated_line_is_dropped():
    account_set = AccountSet()
    handle_line(account_set, "INFO|ACC1|TICK1|STRAT1")

    outcome = handle_line(account_set, "DAILY|01/06/2024|100")

    assert outcome is LineOutcome.DROPPED
    assert account_set.accounts["ACC1"].strategies["STRAT1"].daily_info == {}


def test_invalid_date_is_reported_as_discarded():
    account_set = AccountSet()
    handle_line(account_set, "INFO|ACC1|TICK1|STRAT1")

    outcome = handle_line(account_set, "DAILY|00/00/0000|100|50|3|5|1100|1000")

    assert outcome is LineOutcome.DISCARDED


def test_parse_file_follows_latest_info_through_noise(tmp_path):
    path = _write_log(
        tmp_path / "strategies.log",
        [
            "INFO|ACC1|TICK1|STRAT1",
            "DAILY|01/06/2024|100|50|3|5|1100|1000",
            "INFO|ACC2|TICK2|STRAT2",
            "",
            "HEARTBEAT|ok",
            "",
            "DAILY|01/06/2024|7|8|9|1|2000|1900",
            "LONG_ENTRY|01/06/2024|1000|1|55.5|1|55.5",
        ],
    )
    account_set = AccountSet()
    report = ScanReport()

    assert parse_file(account_set, path, report)

    first = account_set.accounts["ACC1"].strategies["STRAT1"]
    second = account_set.accounts["ACC2"].strategies["STRAT2"]
    assert first.daily_info[20240601].open_profit == pytest.approx(100.0)
    assert first.trade_info == []
    assert second.daily_info[20240601].open_profit == pytest.approx(7.0)
    assert len(second.trade_info) == 1
    assert report.files_parsed == 1
    assert report.lines_read == 6
    assert report.records_applied == 5
    assert report.lines_dropped == 1


def test_parse_file_handles_windows_line_endings(tmp_path):
    path = tmp_path / "crlf.log"
    path.write_bytes(
        b"INFO|ACC1|TICK1|STRAT1\r\nDAILY|01/06/2024|100|50|3|5|1100|1000\r\n")
    account_set = AccountSet()

    parse_file(account_set, path)

    info = account_set.accounts["ACC1"].strategies["STRAT1"].daily_info[20240601]
    assert info.balance == pytest.approx(1000.0)


def test_parse_file_skips_unopenable_file(tmp_path, caplog):
    account_set = AccountSet()
    report = ScanReport()

    with caplog.at_level(logging.ERROR):
        parsed = parse_file(account_set, tmp_path / "missing.log", report)

    assert not parsed
    assert account_set.accounts == {}
    assert report.files_skipped == ["missing.log"]
    assert report.files_parsed == 0
    assert "Cannot open file for reading" in caplog.text


def test_parse_file_applies_lines_around_undecodable_bytes(tmp_path, caplog):
    path = tmp_path / "cp1252.log"
    path.write_bytes(
        b"INFO|ACC1|TICK1|STRAT1\n"
        b"DAILY|01/06/2024|1|0|0|0|0|0\n"
        b"INFO|ACC1|TICK2|Strat\xe9gie\n"
        b"DAILY|02/06/2024|2|0|0|0|0|0\n"
        b"INFO|ACC2|TICK3|STRAT3\n"
        b"DAILY|03/06/2024|3|0|0|0|0|0\n"
    )
    account_set = AccountSet()
    report = ScanReport()

    with caplog.at_level(logging.ERROR):
        parsed = parse_file(account_set, path, report)

    assert parsed
    assert report.lines_read == 6
    assert report.records_applied == 6
    assert "Cannot scan file" not in caplog.text
    first = account_set.accounts["ACC1"].strategies
    assert 20240601 in first["STRAT1"].daily_info
    assert 20240602 in first["Strat\ufffdgie"].daily_info
    assert 20240603 in account_set.accounts["ACC2"].strategies["STRAT3"].daily_info
