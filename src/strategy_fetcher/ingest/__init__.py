"""Ingestion pipeline turning automation logs into an account model."""

from .converters import Conversion, convert_date, convert_float, convert_int
from .handlers import MissingContextError, handle_daily, handle_info, handle_trade
from .parser import LineOutcome, RecordType, classify_line, handle_line, parse_file
from .report import ScanReport
from .scanner import DEFAULT_FILE_SUFFIX, ScanResult, list_log_files, scan_directory

__all__ = [
    "Conversion",
    "DEFAULT_FILE_SUFFIX",
    "LineOutcome",
    "MissingContextError",
    "RecordType",
    "ScanReport",
    "ScanResult",
    "classify_line",
    "convert_date",
    "convert_float",
    "convert_int",
    "handle_daily",
    "handle_info",
    "handle_line",
    "handle_trade",
    "list_log_files",
    "parse_file",
    "scan_directory",
]
