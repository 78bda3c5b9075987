from __future__ import annotations

from typing import Optional

from flask import Flask

from ssd_web.adapters.pmc_fetcher import PmcEfetchFetcher, build_session
from ssd_web.config import MAX_WORKERS, AppSettings, IniConfig, configure_logging
from ssd_web.repositories.batch_repository import BatchRepository
from ssd_web.services.batch_service import BatchService
from ssd_web.services.detector import SoftwareDetector
from ssd_web.services.identifier_normalization import PmcIdentifierNormalizer
from ssd_web.web.routes import create_blueprint

USER_AGENT = "ssd-web/0.1 (statistical software detection)"


def build_batch_service(settings: AppSettings, *, max_workers: Optional[int] = None) -> BatchService:
    workers = settings.max_workers if max_workers is None else max_workers
    if not 1 <= workers <= MAX_WORKERS:
        raise ValueError(f"max_workers must be between 1 and {MAX_WORKERS}, got {workers}")

    fetcher = PmcEfetchFetcher(
        base_url=settings.efetch_url,
        timeout_seconds=settings.timeout_seconds,
        tool=settings.ncbi_tool,
        email=settings.ncbi_email,
        api_key=settings.ncbi_api_key,
        session=build_session(USER_AGENT),
    )

    return BatchService(
        normalizer=PmcIdentifierNormalizer(prefix=settings.identifier_prefix),
        fetcher=fetcher,
        detector=SoftwareDetector(),
        request_delay_seconds=settings.request_delay_seconds,
        max_workers=workers,
        error_message_limit=settings.error_message_limit,
    )


def create_app(settings: Optional[AppSettings] = None) -> Flask:
    if settings is None:
        settings = IniConfig.from_env_or_default().load_settings()

    configure_logging(settings.log_level)

    batch_service = build_batch_service(settings)
    batch_repo = BatchRepository(max_runs=1)

    app = Flask(__name__)
    app.register_blueprint(create_blueprint(batch_service, batch_repo, settings))

    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug

    return app
