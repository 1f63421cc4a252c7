import logging
from pathlib import Path

import pytest

from strategy_fetcher.ingest import scanner
from strategy_fetcher.ingest.scanner import list_log_files, scan_directory


def _write_log(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def sorted_listing(monkeypatch):
    original = scanner.list_log_files

    def _sorted(directory, suffix=scanner.DEFAULT_FILE_SUFFIX):
        return sorted(original(directory, suffix))

    monkeypatch.setattr(scanner, "list_log_files", _sorted)


def test_context_carries_over_between_files(tmp_path, sorted_listing):
    _write_log(
        tmp_path / "a.log",
        ["INFO|ACC1|TICK1|STRAT1", "DAILY|01/06/2024|100|50|3|5|1100|1000"],
    )
    _write_log(tmp_path / "b.log", ["DAILY|02/06/2024|90|40|2|4|1090|990"])

    result = scan_directory(tmp_path)

    assert result is not None
    strategy = result.account_set.accounts["ACC1"].strategies["STRAT1"]
    assert sorted(strategy.daily_info) == [20240601, 20240602]
    assert strategy.daily_info[20240602].open_profit == pytest.approx(90.0)
    account = result.account_set.accounts["ACC1"]
    assert account.balance == pytest.approx(990.0)
    assert result.report.files_matched == 2
    assert result.report.files_parsed == 2
    assert result.report.records_applied == 3


def test_only_regular_files_with_suffix_are_parsed(tmp_path):
    _write_log(tmp_path / "live.log", ["INFO|ACC1|TICK1|STRAT1"])
    _write_log(tmp_path / "notes.txt", ["INFO|ACC2|TICK2|STRAT2"])
    (tmp_path / "archive.log").mkdir()
    _write_log(tmp_path / "archive.log" / "old.log", ["INFO|ACC3|TICK3|STRAT3"])

    assert [path.name for path in list_log_files(tmp_path)] == ["live.log"]

    result = scan_directory(tmp_path)

    assert result is not None
    assert list(result.account_set.accounts) == ["ACC1"]


def test_custom_suffix(tmp_path):
    _write_log(tmp_path / "live.log", ["INFO|ACC1|TICK1|STRAT1"])
    _write_log(tmp_path / "live.txt", ["INFO|ACC2|TICK2|STRAT2"])

    result = scan_directory(tmp_path, ".txt")

    assert result is not None
    assert list(result.account_set.accounts) == ["ACC2"]


def test_unlistable_directory_returns_none(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        result = scan_directory(tmp_path / "missing")

    assert result is None
    assert "Scan error" in caplog.text


def test_empty_directory_yields_empty_model(tmp_path):
    result = scan_directory(tmp_path)

    assert result is not None
    assert result.account_set.accounts == {}
    assert result.report.files_matched == 0
    assert result.report.directory == tmp_path
