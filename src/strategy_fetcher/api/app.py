"""FastAPI application serving the published account snapshot."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from .. import __version__
from ..config import AppSettings
from ..frames import SnapshotFrames
from ..model import Strategy
from ..scheduler import PeriodicScanner, ScanInProgressError
from ..snapshot import SnapshotStore


def _strategy_payload(strategy: Strategy, *, include_history: bool) -> Dict[str, Any]:
    payload = strategy.to_dict()
    if not include_history:
        payload.pop("daily_info", None)
        payload.pop("trade_info", None)
    return payload


def _csv_response(body: str, filename: str) -> PlainTextResponse:
    response = PlainTextResponse(body, media_type="text/csv; charset=utf-8")
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    response.headers["Cache-Control"] = "no-store"
    return response


def create_app(
    settings: AppSettings | None = None,
    store: SnapshotStore | None = None,
    scanner: PeriodicScanner | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The periodic scanner is started when the application starts serving and
    stopped on shutdown. Every route reads the snapshot handle once.
    """

    settings = settings or AppSettings()
    if scanner is not None:
        store = scanner.store
    store = store or SnapshotStore()
    scanner = scanner or PeriodicScanner(settings.scan_settings(), store)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scanner.start()
        try:
            yield
        finally:
            scanner.stop()

    app = FastAPI(title="Strategy Fetcher", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.snapshot_store = store
    app.state.scanner = scanner

    @app.get("/api/accounts", response_class=JSONResponse)
    async def list_accounts() -> JSONResponse:
        accounts = store.get_accounts()
        return JSONResponse({"accounts": [account.to_dict() for account in accounts]})

    @app.get("/api/strategies", response_class=JSONResponse)
    async def list_strategies(
        include_history: bool = Query(
            default=True,
            description="Include daily and trade records of each strategy.",
        ),
    ) -> JSONResponse:
        strategies = store.get_strategies()
        return JSONResponse(
            {
                "strategies": [
                    _strategy_payload(strategy, include_history=include_history)
                    for strategy in strategies
                ]
            }
        )

    @app.get("/api/entities", response_class=JSONResponse)
    async def list_entities() -> JSONResponse:
        kind = settings.variant
        entities = store.get_entities(kind)
        return JSONResponse(
            {
                "kind": kind.value,
                kind.value: [entity.to_dict() for entity in entities],
            }
        )

    @app.get("/api/status", response_class=JSONResponse)
    async def get_status() -> JSONResponse:
        snapshot = store.current()
        payload = scanner.status()
        payload["snapshot"] = {
            "version": snapshot.version,
            "published_at": snapshot.published_at.isoformat() if snapshot.published_at else "",
            "account_count": len(snapshot.accounts),
            "report": snapshot.report.to_dict() if snapshot.report else None,
        }
        return JSONResponse(payload)

    @app.get("/api/scan/history", response_class=JSONResponse)
    async def get_scan_history() -> JSONResponse:
        return JSONResponse({"runs": scanner.history()})

    @app.post("/api/scan", response_class=JSONResponse)
    async def trigger_scan() -> JSONResponse:
        try:
            run = await asyncio.to_thread(scanner.run_once, blocking=False)
        except ScanInProgressError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return JSONResponse(run.to_dict())

    @app.get("/api/export/daily.csv", response_class=PlainTextResponse)
    async def export_daily() -> PlainTextResponse:
        df = SnapshotFrames.daily(store.current())
        return _csv_response(df.to_csv(index=False), "daily_info.csv")

    @app.get("/api/export/trades.csv", response_class=PlainTextResponse)
    async def export_trades() -> PlainTextResponse:
        df = SnapshotFrames.trades(store.current())
        return _csv_response(df.to_csv(index=False), "trade_info.csv")

    return app
