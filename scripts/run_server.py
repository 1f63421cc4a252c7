"""Launch the strategy fetcher: periodic log scan plus the HTTP read API."""

from __future__ import annotations

import argparse
import ssl
from pathlib import Path

import uvicorn

from strategy_fetcher.api import create_app
from strategy_fetcher.config import AppSettings
from strategy_fetcher.logging_config import configure_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--scan-dir",
        type=Path,
        default=None,
        help="Override the directory scanned for automation logs.",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: STRATEGY_FETCHER_BIND_HOST).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server (default: STRATEGY_FETCHER_BIND_PORT).",
    )
    parser.add_argument(
        "--tls",
        action="store_true",
        help="Serve HTTPS and require client certificates signed by the configured CA.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = AppSettings()
    if args.scan_dir is not None:
        settings.scan_dir = args.scan_dir.expanduser()
    host = args.host or settings.bind_host
    port = args.port or settings.bind_port

    logger = configure_logging(settings.log_level, settings.log_file)
    logger.info("Registering services...")
    app = create_app(settings)

    ssl_options: dict[str, object] = {}
    if args.tls:
        tls = settings.require_tls()
        ssl_options = {
            "ssl_certfile": str(tls.cert_file),
            "ssl_keyfile": str(tls.key_file),
            "ssl_ca_certs": str(tls.ca_file),
            "ssl_cert_reqs": ssl.CERT_REQUIRED,
        }
        logger.info("Starting HTTPS server...")

    uvicorn.run(app, host=host, port=port, log_level="info", **ssl_options)


if __name__ == "__main__":
    main()
