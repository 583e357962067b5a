"""FastAPI application exposing the monitor's query API.

Routes (under ``config.api_prefix``, default ``/api``)::

    GET /generations/current   latest sample or null
    GET /generations/history   ?limit&offset&anomalyOnly
    GET /generations/stats     summary statistics
    GET /generations/chart     daily rollups + anomaly points
    GET /health                component status

The lifespan starts the scheduler on startup and stops it on shutdown.
Query failures are logged with full detail and answered with HTTP 500 and
a generic ``{"error": ...}`` body.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, TypeVar

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rng_monitor import __version__
from rng_monitor.api.schemas import (
    ChartOut,
    ErrorOut,
    HealthOut,
    HistoryOut,
    SampleOut,
    StatsOut,
)
from rng_monitor.monitor import Monitor

if TYPE_CHECKING:
    from datetime import datetime

    from rng_monitor.config import MonitorConfig
    from rng_monitor.entropy.base import EntropySource
    from rng_monitor.query.service import QueryService
    from rng_monitor.store.base import RecordStore

logger = logging.getLogger("rng_monitor")

T = TypeVar("T")

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {500: {"model": ErrorOut}}


def _query_service(request: Request) -> QueryService:
    monitor: Monitor = request.app.state.monitor
    return monitor.query


def _run_query(action: str, query: Callable[[], T]) -> T | JSONResponse:
    """Run *query*, turning any failure into a generic 500 response."""
    try:
        return query()
    except Exception:  # Intentional: API boundary, detail stays in the server log
        logger.exception("Failed to %s", action)
        return JSONResponse(status_code=500, content={"error": f"Failed to {action}"})


def _build_router() -> APIRouter:
    router = APIRouter()

    @router.get(
        "/generations/current",
        response_model=SampleOut | None,
        responses=_ERROR_RESPONSES,
    )
    def current_generation(request: Request) -> SampleOut | None | JSONResponse:
        service = _query_service(request)

        def query() -> SampleOut | None:
            sample = service.latest()
            return SampleOut.from_sample(sample) if sample is not None else None

        return _run_query("fetch current generation", query)

    @router.get("/generations/history", response_model=HistoryOut, responses=_ERROR_RESPONSES)
    def generation_history(
        request: Request,
        limit: str | None = Query(default=None),
        offset: str | None = Query(default=None),
        anomaly_only: bool = Query(default=False, alias="anomalyOnly"),
    ) -> HistoryOut | JSONResponse:
        service = _query_service(request)
        return _run_query(
            "fetch history",
            lambda: HistoryOut.from_page(service.history(limit, offset, anomaly_only)),
        )

    @router.get("/generations/stats", response_model=StatsOut, responses=_ERROR_RESPONSES)
    def generation_stats(request: Request) -> StatsOut | JSONResponse:
        service = _query_service(request)
        return _run_query("fetch stats", lambda: StatsOut.from_stats(service.summary_stats()))

    @router.get("/generations/chart", response_model=ChartOut, responses=_ERROR_RESPONSES)
    def generation_chart(request: Request) -> ChartOut | JSONResponse:
        service = _query_service(request)
        return _run_query("fetch chart data", lambda: ChartOut.from_chart(service.chart_data()))

    @router.get("/health", response_model=HealthOut)
    def health(request: Request) -> HealthOut:
        monitor: Monitor = request.app.state.monitor
        return HealthOut.model_validate(monitor.health())

    return router


def create_app(
    config: MonitorConfig | None = None,
    *,
    store: RecordStore | None = None,
    source: EntropySource | None = None,
    clock: Callable[[], datetime] | None = None,
) -> FastAPI:
    """Build the FastAPI app and the monitor behind it.

    The monitor is constructed eagerly so routes work even when the app is
    driven without its lifespan; the lifespan only starts and stops
    scheduled generation.

    Args:
        config: Settings; loaded from the environment when omitted.
        store: Optional record store override.
        source: Optional entropy source override.
        clock: Optional time source override.

    Returns:
        The configured application. ``app.state.monitor`` holds the Monitor.
    """
    monitor = Monitor(config, store=store, source=source, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        monitor.start()
        try:
            yield
        finally:
            monitor.stop()

    app = FastAPI(title="rng-monitor", version=__version__, lifespan=lifespan)
    app.state.monitor = monitor
    app.add_middleware(
        CORSMiddleware,
        allow_origins=monitor.config.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(_build_router(), prefix=monitor.config.api_prefix)
    return app
