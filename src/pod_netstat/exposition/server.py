"""HTTP listener for the exporter.

Routes:
- ``/`` and ``/healthcheck``: liveness, always ``OK``
- ``/metrics``: one collection cycle per request, rate limited
"""

from __future__ import annotations

import logging
from typing import Protocol

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from pod_netstat.core.constants import RATE_LIMIT_BURST
from pod_netstat.core.errors import NetstatError
from pod_netstat.core.schemas import ExporterConfig, PodInfo
from pod_netstat.exposition.metrics import render_metrics
from pod_netstat.exposition.ratelimit import RateLimiter
from pod_netstat.netstat.collector import PodStatsCollector

logger = logging.getLogger(__name__)


class PodSource(Protocol):
    def get_pod_list(self) -> list[PodInfo]: ...


def error_response(err: Exception) -> PlainTextResponse:
    """Plain-text 500 response describing a failed scrape."""
    return PlainTextResponse(
        "An error has occurred while serving metrics:\n\n" + str(err) + "\n",
        status_code=500,
    )


def create_app(
    pod_source: PodSource,
    collector: PodStatsCollector,
    rate_limit: float,
    burst: int = RATE_LIMIT_BURST,
) -> FastAPI:
    """Create the exporter application.

    Args:
        pod_source: Supplies the pods of this node for each scrape
        collector: Collects per-pod statistics from the host filesystem
        rate_limit: Number of /metrics requests served per second
        burst: Number of /metrics requests that may be served back to back
    """
    app = FastAPI(title="pod-netstat", docs_url=None, redoc_url=None, openapi_url=None)
    limiter = RateLimiter(rate_limit, burst)

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "OK\n"

    @app.get("/healthcheck", response_class=PlainTextResponse)
    def healthcheck() -> str:
        return "OK\n"

    # Plain def handlers run in the threadpool, so blocking reads are fine here.
    @app.get("/metrics")
    def metrics(request: Request) -> Response:
        if not limiter.allow():
            return PlainTextResponse("Too Many Requests\n", status_code=429)

        try:
            pods = pod_source.get_pod_list()
        except NetstatError as e:
            logger.error(str(e))
            return error_response(e)

        stats = collector.collect_all(pods)
        try:
            body, content_type = render_metrics(stats, request.headers.get("accept"))
        except ValueError as e:
            logger.error(f"Error encoding metrics: {e}")
            return error_response(e)
        return Response(content=body, media_type=content_type)

    return app


def serve(config: ExporterConfig, pod_source: PodSource) -> None:
    """Run the exporter until SIGTERM or SIGINT."""
    collector = PodStatsCollector(config.host_mount_path)
    app = create_app(pod_source, collector, config.rate_limit)

    logger.info(
        f"Serving metrics on {config.listen_host}:{config.listen_port} "
        f"(host filesystem at {config.host_mount_path})"
    )
    uvicorn.run(
        app,
        host=config.listen_host,
        port=config.listen_port,
        log_config=None,
        access_log=False,
    )
    logger.info("Received SIGTERM or SIGINT. Shut down.")
