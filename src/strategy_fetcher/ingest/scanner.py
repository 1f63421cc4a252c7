"""Directory scanning for automation log files."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from ..model import AccountSet
from .parser import parse_file
from .report import ScanReport

logger = logging.getLogger(__name__)

DEFAULT_FILE_SUFFIX = ".log"


@dataclass(slots=True)
class ScanResult:
    """Account model built by one scan together with its counters."""

    account_set: AccountSet = field(default_factory=AccountSet)
    report: ScanReport = field(default_factory=ScanReport)


def list_log_files(directory: Path, suffix: str = DEFAULT_FILE_SUFFIX) -> list[Path]:
    """Return regular files in ``directory`` ending with ``suffix``.

    Entries are returned in the order the operating system lists them. Raises
    :class:`OSError` when the directory cannot be listed.
    """

    with os.scandir(directory) as entries:
        return [
            Path(entry.path)
            for entry in entries
            if entry.name.endswith(suffix) and entry.is_file()
        ]


def scan_directory(directory: Path, suffix: str = DEFAULT_FILE_SUFFIX) -> ScanResult | None:
    """Parse every matching file of ``directory`` into a fresh :class:`AccountSet`.

    The context cursor of the account set is shared by all files of the scan,
    so a file without its own INFO header continues the account and strategy
    of the file parsed before it.

    Returns ``None`` when the directory cannot be listed.
    """

    logger.info("Fetching files from: %s", directory)
    try:
        paths = list_log_files(directory, suffix)
    except OSError as exc:
        logger.error("Scan error: %s", exc)
        return None

    result = ScanResult(report=ScanReport(directory=directory))
    result.report.files_matched = len(paths)
    for path in paths:
        parse_file(result.account_set, path, result.report)
    return result
