"""Counters describing one scan cycle."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict


@dataclass(slots=True)
class ScanReport:
    """Summary of a scan cycle."""

    directory: Path | None = None
    files_matched: int = 0
    files_parsed: int = 0
    files_skipped: list[str] = field(default_factory=list)
    lines_read: int = 0
    records_applied: int = 0
    records_discarded: int = 0
    lines_dropped: int = 0

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["directory"] = str(self.directory) if self.directory else None
        return payload
