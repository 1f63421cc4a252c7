"""Application configuration helpers."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .snapshot import EntityKind


class ScanSettings(BaseModel):
    """Settings consumed by the periodic directory scan."""

    directory: Path = Field(default=Path("data/scan"))
    period_hours: float = Field(default=1.0)
    file_suffix: str = Field(default=".log")
    startup_delay_seconds: float = Field(default=2.0)

    @property
    def period_seconds(self) -> float:
        return self.period_hours * 3600.0


class TLSPaths(BaseModel):
    """Certificate material for serving the API with client authentication."""

    cert_file: Path
    key_file: Path
    ca_file: Path


class AppSettings(BaseSettings):
    """Project-wide settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    scan_dir: Path = Field(default=Path("data/scan"),
                           alias="STRATEGY_FETCHER_SCAN_DIR")
    scan_period_hours: float = Field(
        default=1.0, alias="STRATEGY_FETCHER_SCAN_PERIOD_HOURS")
    file_suffix: str = Field(default=".log", alias="STRATEGY_FETCHER_FILE_SUFFIX")
    startup_delay_seconds: float = Field(
        default=2.0, alias="STRATEGY_FETCHER_STARTUP_DELAY_SECONDS")
    variant: EntityKind = Field(
        default=EntityKind.ACCOUNTS, alias="STRATEGY_FETCHER_VARIANT")
    bind_host: str = Field(default="127.0.0.1",
                           alias="STRATEGY_FETCHER_BIND_HOST")
    bind_port: int = Field(default=8443, alias="STRATEGY_FETCHER_BIND_PORT")
    log_file: Path | None = Field(default=None, alias="STRATEGY_FETCHER_LOG_FILE")
    log_level: str = Field(default="INFO", alias="STRATEGY_FETCHER_LOG_LEVEL")
    tls_cert_file: Path | None = Field(
        default=None, alias="STRATEGY_FETCHER_TLS_CERT_FILE")
    tls_key_file: Path | None = Field(
        default=None, alias="STRATEGY_FETCHER_TLS_KEY_FILE")
    tls_ca_file: Path | None = Field(
        default=None, alias="STRATEGY_FETCHER_TLS_CA_FILE")

    def scan_settings(self) -> ScanSettings:
        return ScanSettings(
            directory=self.scan_dir,
            period_hours=self.scan_period_hours,
            file_suffix=self.file_suffix,
            startup_delay_seconds=self.startup_delay_seconds,
        )

    def require_tls(self) -> TLSPaths:
        """Return TLS file locations or raise a helpful error."""

        if not self.tls_cert_file or not self.tls_key_file or not self.tls_ca_file:
            raise RuntimeError(
                "Missing TLS configuration. Set STRATEGY_FETCHER_TLS_CERT_FILE, "
                "STRATEGY_FETCHER_TLS_KEY_FILE and STRATEGY_FETCHER_TLS_CA_FILE "
                "in your environment or .env file."
            )
        return TLSPaths(
            cert_file=self.tls_cert_file,
            key_file=self.tls_key_file,
            ca_file=self.tls_ca_file,
        )
