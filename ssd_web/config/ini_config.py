########## ini_config.py

import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path

from ssd_web.adapters.pmc_fetcher import EFETCH_URL

INI_DEFAULT_NAME = "SoftwareDetection.ini"
# Upper bound on concurrent fetches against NCBI.
MAX_WORKERS = 5


@dataclass(frozen=True)
class AppSettings:
    # Upstream fetch
    efetch_url: str
    timeout_seconds: float
    request_delay_seconds: float
    max_workers: int
    ncbi_tool: str
    ncbi_email: str
    ncbi_api_key: str

    # Batch policy
    max_batch: int
    error_message_limit: int
    identifier_prefix: str

    log_level: str

    flask_host: str
    flask_port: int
    flask_debug: bool


class IniConfig:
    """
    Adapter around ConfigParser.
    Keeps INI handling out of your app/service code.
    """

    def __init__(self, ini_path: Path):
        self._ini_path = ini_path
        self._cfg = ConfigParser()
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
        if not read_ok:
            raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")

    @staticmethod
    def from_env_or_default() -> "IniConfig":
        ini_raw = (os.getenv("APP_INI") or "").strip()
        # If APP_INI is not set, default to repo-root-relative ini location
        ini_path = Path(ini_raw) if ini_raw else (Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME)
        return IniConfig(ini_path)

    def _str(self, section: str, key: str, fallback: str) -> str:
        return (self._cfg.get(section, key, fallback=fallback) or "").strip() or fallback

    def load_settings(self) -> AppSettings:
        # Fetch
        efetch_url = self._str("fetch", "base_url", EFETCH_URL)
        timeout_seconds = self._cfg.getfloat("fetch", "timeout_seconds", fallback=30.0)
        request_delay_seconds = self._cfg.getfloat("fetch", "request_delay_seconds", fallback=0.2)
        max_workers = self._cfg.getint("fetch", "max_workers", fallback=1)
        ncbi_tool = (self._cfg.get("fetch", "tool", fallback="") or "").strip()
        ncbi_email = (self._cfg.get("fetch", "email", fallback="") or "").strip()
        ncbi_api_key = (self._cfg.get("fetch", "api_key", fallback="") or "").strip()

        # Batch
        max_batch = self._cfg.getint("batch", "max_batch", fallback=20)
        error_message_limit = self._cfg.getint("batch", "error_message_limit", fallback=100)
        identifier_prefix = self._str("identifiers", "prefix", "PMC")

        log_level = self._str("logging", "level", "INFO").upper()

        # Flask
        flask_host = self._str("flask", "host", "127.0.0.1")
        flask_port = self._cfg.getint("flask", "port", fallback=5000)
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=True)

        # Validate
        if timeout_seconds <= 0:
            raise ValueError(f"fetch.timeout_seconds must be positive, got {timeout_seconds}")
        if request_delay_seconds < 0:
            raise ValueError(f"fetch.request_delay_seconds must not be negative, got {request_delay_seconds}")
        if not 1 <= max_workers <= MAX_WORKERS:
            raise ValueError(f"fetch.max_workers must be between 1 and {MAX_WORKERS}, got {max_workers}")
        if max_batch < 1:
            raise ValueError(f"batch.max_batch must be at least 1, got {max_batch}")
        if error_message_limit < 1:
            raise ValueError(f"batch.error_message_limit must be at least 1, got {error_message_limit}")

        return AppSettings(
            efetch_url=efetch_url,
            timeout_seconds=timeout_seconds,
            request_delay_seconds=request_delay_seconds,
            max_workers=max_workers,
            ncbi_tool=ncbi_tool,
            ncbi_email=ncbi_email,
            ncbi_api_key=ncbi_api_key,
            max_batch=max_batch,
            error_message_limit=error_message_limit,
            identifier_prefix=identifier_prefix,
            log_level=log_level,
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
        )
