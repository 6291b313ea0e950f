from __future__ import annotations

import logging

from fastapi import FastAPI

from ikuai_exporter import __version__
from ikuai_exporter.api.routes import metrics_router
from ikuai_exporter.api.routes import router as api_router
from ikuai_exporter.client.ikuai import IKuaiClient
from ikuai_exporter.core.config import APP_NAME, ExporterConfig
from ikuai_exporter.services.assembler import MetricAssembler, RouterQueries
from ikuai_exporter.services.sink import build_registry

logger = logging.getLogger(__name__)


def build_client(config: ExporterConfig) -> IKuaiClient:
    return IKuaiClient(
        config.ikuai_url,
        config.username,
        config.password,
        verify_tls=not config.insecure_skip_verify,
        timeout=config.timeout_seconds,
        debug=config.debug,
    )


def create_app(config: ExporterConfig, client: RouterQueries | None = None) -> FastAPI:
    app = FastAPI(title=APP_NAME, version=__version__)
    app.include_router(api_router)
    app.include_router(metrics_router)

    router_client = client if client is not None else build_client(config)
    app.state.config = config
    app.state.client = router_client
    app.state.registry = build_registry(MetricAssembler(router_client))

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        close = getattr(app.state.client, "close", None)
        if close is not None:
            close()
        logger.info("%s stopped", APP_NAME)

    return app
