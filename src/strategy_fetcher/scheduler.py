"""Background thread running scan cycles at a fixed period."""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from .config import ScanSettings
from .ingest.report import ScanReport
from .ingest.scanner import ScanResult, scan_directory
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 1.0

ScanFunction = Callable[[Path, str], Optional[ScanResult]]


class ScanInProgressError(RuntimeError):
    """Raised when a scan is requested while another one is running."""


def _to_iso(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.astimezone(timezone.utc).isoformat()


@dataclass
class ScanRun:
    run_id: str
    started_at: datetime
    completed_at: datetime | None
    status: str
    report: ScanReport | None = None
    snapshot_version: int | None = None
    error: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        duration = None
        if self.completed_at is not None:
            duration = (self.completed_at - self.started_at).total_seconds()
        return {
            "run_id": self.run_id,
            "status": self.status,
            "error": self.error,
            "started_at": _to_iso(self.started_at),
            "completed_at": _to_iso(self.completed_at),
            "duration_seconds": duration,
            "snapshot_version": self.snapshot_version,
            "report": self.report.to_dict() if self.report else None,
        }


class PeriodicScanner:
    """Drive scan cycles serially and publish their results.

    The thread waits ``startup_delay_seconds`` before the first cycle and
    ``period_hours`` between cycles. Cycles never overlap: a slow cycle only
    delays the next one.
    """

    def __init__(
        self,
        settings: ScanSettings,
        store: SnapshotStore,
        *,
        max_history: int = 50,
        scan: ScanFunction | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self._scan = scan or scan_directory
        self._lock = threading.RLock()
        self._cycle_lock = threading.Lock()
        self._history: deque[ScanRun] = deque(maxlen=max_history)
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None
        self._running = False
        self._status_message = "idle"
        self._started_at: datetime | None = None
        self._last_run_completed_at: datetime | None = None
        self._iterations = 0

    def start(self) -> Dict[str, Any]:
        with self._lock:
            if self._running:
                raise RuntimeError("Periodic scanner is already running.")
            self._running = True
            self._status_message = "waiting"
            self._started_at = datetime.now(timezone.utc)
            stop_event = threading.Event()
            self._stop_event = stop_event
            thread = threading.Thread(
                target=self._run_loop,
                args=(stop_event,),
                name="PeriodicScanner",
                daemon=True,
            )
            self._thread = thread

        logger.info(
            "Starting periodic scan of %s every %s hour(s)",
            self.settings.directory,
            self.settings.period_hours,
        )
        thread.start()
        return self.status()

    def stop(self) -> Dict[str, Any]:
        thread: threading.Thread | None
        with self._lock:
            if not self._running:
                return self.status()
            if self._stop_event:
                self._stop_event.set()
            thread = self._thread

        if thread and thread is not threading.current_thread():
            thread.join(timeout=10)

        with self._lock:
            self._running = False
            self._status_message = "stopped"
            self._thread = None
            self._stop_event = None

        return self.status()

    def run_once(self, *, blocking: bool = True) -> ScanRun:
        """Run one scan cycle on the calling thread.

        With ``blocking=False`` a :class:`ScanInProgressError` is raised
        instead of waiting for a cycle that is already running.
        """

        if not self._cycle_lock.acquire(blocking=blocking):
            raise ScanInProgressError("A scan cycle is already running.")
        try:
            with self._lock:
                self._status_message = "scanning"
            run = self._execute_cycle()
        finally:
            self._cycle_lock.release()

        with self._lock:
            self._history.append(run)
            self._iterations += 1
            self._last_run_completed_at = run.completed_at or run.started_at
            if run.status == "completed":
                self._status_message = "running" if self._running else "idle"
            else:
                self._status_message = run.status
        return run

    def status(self) -> Dict[str, Any]:
        with self._lock:
            next_run_at = None
            if self._running and self._last_run_completed_at:
                next_run_at = self._last_run_completed_at + timedelta(
                    seconds=self._interval_seconds()
                )
            last_run = self._history[-1].to_dict() if self._history else None
            return {
                "running": self._running,
                "status": self._status_message,
                "iterations": self._iterations,
                "directory": str(self.settings.directory),
                "file_suffix": self.settings.file_suffix,
                "period_hours": self.settings.period_hours,
                "started_at": _to_iso(self._started_at),
                "last_run_at": _to_iso(self._last_run_completed_at),
                "next_run_at": _to_iso(next_run_at),
                "snapshot_version": self.store.current().version,
                "last_run": last_run,
            }

    def history(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [run.to_dict() for run in list(self._history)]

    # Internal helpers -------------------------------------------------

    def _interval_seconds(self) -> float:
        return max(self.settings.period_seconds, MIN_INTERVAL_SECONDS)

    def _run_loop(self, stop_event: threading.Event) -> None:
        if not stop_event.wait(max(self.settings.startup_delay_seconds, 0.0)):
            while not stop_event.is_set():
                self.run_once()
                if stop_event.wait(self._interval_seconds()):
                    break

        with self._lock:
            if self._stop_event is stop_event:
                self._running = False
                self._status_message = "idle"
                self._thread = None
                self._stop_event = None

    def _execute_cycle(self) -> ScanRun:
        run_id = str(uuid4())
        started_at = datetime.now(timezone.utc)
        report: ScanReport | None = None
        snapshot_version: int | None = None
        error: str | None = None
        status = "completed"

        try:
            result = self._scan(self.settings.directory, self.settings.file_suffix)
            if result is None:
                status = "failed"
                error = f"Cannot list directory: {self.settings.directory}"
            else:
                report = result.report
                snapshot = self.store.publish(result.account_set.accounts, report)
                snapshot_version = snapshot.version
                logger.info(
                    "Published snapshot %d: %d account(s) from %d file(s)",
                    snapshot.version,
                    len(snapshot.accounts),
                    report.files_parsed,
                )
        except Exception as exc:
            logger.exception("Scan cycle failed; keeping the previous snapshot")
            status = "error"
            error = str(exc)

        return ScanRun(
            run_id=run_id,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            status=status,
            report=report,
            snapshot_version=snapshot_version,
            error=error,
        )
