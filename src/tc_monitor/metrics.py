from __future__ import annotations

from collections import defaultdict
from typing import Dict

from prometheus_client import Counter, Gauge, Histogram


_DISPATCH_TOTAL = Counter(
    "tcm_dispatch_requests_total",
    "Datasource dispatch calls",
    labelnames=["operation", "status"],
)
_DISPATCH_DURATION = Histogram(
    "tcm_dispatch_duration_ms",
    "Datasource dispatch duration in ms",
    labelnames=["operation"],
    buckets=(10, 50, 100, 200, 500, 1000, 3000, 5000, 10000),
)
_SERVICE_CONNECTIVITY = Gauge(
    "tcm_service_connectivity_status",
    "Last connectivity test per service (1 success, 0 otherwise)",
    labelnames=["service"],
)


class DispatchMetricsCollector:
    def __init__(self) -> None:
        # In-memory mirror so callers can summarize without scraping
        self._totals: Dict[str, int] = defaultdict(int)

    def record_dispatch(self, operation: str, success: bool, duration_ms: float) -> None:
        status = "success" if success else "failure"
        _DISPATCH_TOTAL.labels(operation=operation, status=status).inc()
        _DISPATCH_DURATION.labels(operation=operation).observe(duration_ms)
        self._totals[f"{operation}:{status}"] += 1

    def record_connectivity(self, service: str, status: str) -> None:
        _SERVICE_CONNECTIVITY.labels(service=service).set(1 if status == "success" else 0)

    def summary(self) -> Dict[str, int]:
        return dict(self._totals)
