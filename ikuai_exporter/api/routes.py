from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ikuai_exporter import __version__
from ikuai_exporter.api.schemas import HealthResponse
from ikuai_exporter.core.config import METRICS_PATH

router = APIRouter(prefix="/api")
metrics_router = APIRouter()


@router.get("/health")
def health(request: Request) -> HealthResponse:
    return HealthResponse(
        ok=True,
        data={
            "status": "ok",
            "version": __version__,
            "ikuai_url": request.app.state.config.ikuai_url,
        },
        meta={"ts_utc": datetime.now(timezone.utc).isoformat()},
    )


@metrics_router.get(METRICS_PATH)
def metrics(request: Request) -> Response:
    payload = generate_latest(request.app.state.registry)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
