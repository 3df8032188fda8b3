"""
Prometheus metrics for Score Sync, labelled by sport where it applies.
"""
from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, start_http_server

from shared.config import Settings, get_settings
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Counters ────────────────────────────────────────────────────────────
PROVIDER_REQUESTS = Counter(
    "ss_provider_requests_total",
    "Total provider HTTP requests",
    ["provider", "kind", "status"],
)
SNAPSHOT_FETCHES = Counter(
    "ss_snapshot_fetches_total",
    "Snapshot fetch outcomes per sport",
    ["sport", "outcome"],
)
DETAIL_FETCHES = Counter(
    "ss_detail_fetches_total",
    "Match detail fetch outcomes per sport",
    ["sport", "outcome"],
)
SUPERSEDED_RESPONSES = Counter(
    "ss_superseded_responses_total",
    "Responses dropped because the selection changed before they resolved",
    ["sport", "channel"],
)
POLL_TICKS = Counter(
    "ss_poll_ticks_total",
    "Background poll ticks",
    ["sport", "action"],
)

# ── Histograms ──────────────────────────────────────────────────────────
FETCH_LATENCY = Histogram(
    "ss_fetch_latency_seconds",
    "Fetch Port call latency in seconds",
    ["sport", "kind"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0),
)
PROVIDER_LATENCY = Histogram(
    "ss_provider_latency_seconds",
    "Provider HTTP request latency in seconds",
    ["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Gauges ──────────────────────────────────────────────────────────────
LIVE_MATCHES = Gauge(
    "ss_live_matches",
    "Live matches in the last applied snapshot",
    ["sport"],
)


def start_metrics_server(settings: Settings | None = None) -> bool:
    """Expose ``/metrics`` on ``settings.metrics_port``. Returns False when disabled or the port is taken."""
    settings = settings or get_settings()
    if not settings.metrics_enabled:
        logger.debug("metrics_server_disabled")
        return False
    try:
        start_http_server(settings.metrics_port)
    except OSError as exc:
        logger.warning("metrics_server_failed", port=settings.metrics_port, error=str(exc))
        return False
    logger.info("metrics_server_started", port=settings.metrics_port)
    return True
