"""Line classification and sequential file parsing."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Tuple

from ..model import AccountSet, TradeType
from .handlers import MissingContextError, handle_daily, handle_info, handle_trade
from .report import ScanReport

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"

INFO_TAG = "INFO"
DAILY_TAG = "DAILY"


class RecordType(str, Enum):
    """Closed set of record kinds found in an automation log."""

    INFO = "info"
    DAILY = "daily"
    TRADE = "trade"


class LineOutcome(str, Enum):
    APPLIED = "applied"
    DISCARDED = "discarded"
    DROPPED = "dropped"


_TRADE_TAGS = frozenset(trade_type.value for trade_type in TradeType)


def classify_line(line: str) -> Tuple[RecordType | None, List[str]]:
    """Split ``line`` into tokens and identify its record type.

    Returns ``None`` as the record type when the leading tag is unknown.
    """

    tokens = line.split(FIELD_SEPARATOR)
    tag = tokens[0]
    if tag == INFO_TAG:
        return RecordType.INFO, tokens
    if tag == DAILY_TAG:
        return RecordType.DAILY, tokens
    if tag in _TRADE_TAGS:
        return RecordType.TRADE, tokens
    return None, tokens


def handle_line(account_set: AccountSet, line: str) -> LineOutcome:
    """Classify one line and apply it to ``account_set``.

    Unknown tags, lines seen before any INFO record and lines with missing
    fields are logged and dropped without touching the model.
    """

    record_type, tokens = classify_line(line)
    try:
        match record_type:
            case RecordType.INFO:
                handle_info(account_set, tokens)
                applied = True
            case RecordType.DAILY:
                applied = handle_daily(account_set, tokens)
            case RecordType.TRADE:
                applied = handle_trade(account_set, tokens)
            case None:
                logger.warning("Skipping unknown token: %s", tokens[0])
                return LineOutcome.DROPPED
    except MissingContextError as exc:
        logger.warning("Skipping line %r: %s", line, exc)
        return LineOutcome.DROPPED
    except IndexError:
        logger.warning("Skipping truncated %s line: %r", tokens[0], line)
        return LineOutcome.DROPPED

    return LineOutcome.APPLIED if applied else LineOutcome.DISCARDED


def parse_file(account_set: AccountSet, path: Path, report: ScanReport | None = None) -> bool:
    """Feed every non-empty line of ``path`` to :func:`handle_line` in file order.

    Returns ``False`` when the file could not be opened. Undecodable bytes are
    replaced with U+FFFD so the rest of their line still parses. An I/O error
    part way through is logged and the lines already applied are kept.
    """

    logger.info("Handling: %s", path.name)
    report = report if report is not None else ScanReport()

    try:
        handle = path.open("r", encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.error("Cannot open file for reading: %s (cause is: %s)", path, exc)
        report.files_skipped.append(path.name)
        return False

    with handle:
        try:
            for raw_line in handle:
                line = raw_line.rstrip("\r\n")
                if not line:
                    continue
                report.lines_read += 1
                outcome = handle_line(account_set, line)
                if outcome is LineOutcome.APPLIED:
                    report.records_applied += 1
                elif outcome is LineOutcome.DISCARDED:
                    report.records_discarded += 1
                else:
                    report.lines_dropped += 1
        except OSError as exc:
            logger.error("Cannot scan file: %s (cause is: %s)", path, exc)

    report.files_parsed += 1
    return True
