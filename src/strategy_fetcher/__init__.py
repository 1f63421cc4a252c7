"""Periodic ingestion of trading-automation logs into an in-memory account model."""

from importlib.metadata import version

__all__ = ["__version__"]

try:
    __version__ = version("strategy-fetcher")
except Exception:  # pragma: no cover - package not installed in dev mode yet.
    __version__ = "0.0.0"
