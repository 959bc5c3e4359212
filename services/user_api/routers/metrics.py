"""Metrics router for the User API Service.

Endpoints:
- GET /metrics/summary - Human-readable counter and gauge summary
- GET /metrics/percentiles - p50/p95/p99 of the latency histograms

The Prometheus scrape endpoint is mounted by the application at
/metrics/prometheus.
"""

import math

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from services.user_api.dependencies import get_metrics
from services.user_api.metrics import MetricsSink

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("/summary", response_class=PlainTextResponse)
async def get_metrics_summary(metrics: MetricsSink = Depends(get_metrics)) -> str:
    """Get current API call and user gauge values as text."""
    return metrics.get_metrics_summary()


@router.get("/percentiles")
async def get_percentiles(metrics: MetricsSink = Depends(get_metrics)) -> dict:
    """Get estimated latency percentiles in seconds (null when unobserved)."""

    def _clean(values: dict[str, float]) -> dict:
        return {key: None if math.isnan(value) else value for key, value in values.items()}

    return {
        "apiResponseTime": _clean(metrics.percentiles(metrics.api_response_time)),
        "databaseQueryTime": _clean(metrics.percentiles(metrics.database_query_time)),
    }
