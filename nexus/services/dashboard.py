"""Headline metrics shown on the admin dashboard."""

from __future__ import annotations

from typing import Optional

from ..config import LatencyConfig
from ..contracts import ApiResponse
from ..models import DashboardMetrics, TimeFilter
from .base import simulate_api_delay


class DashboardService:
    """Serve the dashboard metrics snapshot for a time filter.

    The snapshot is not recomputed per filter; the filter only has to be one
    of the known ``time_filters``.
    """

    def __init__(
        self,
        metrics: DashboardMetrics,
        time_filters: list[TimeFilter],
        latency: Optional[LatencyConfig] = None,
    ) -> None:
        self.metrics = metrics
        self.time_filters = time_filters
        self.latency = latency or LatencyConfig()

    async def get_metrics(self, time_filter: str = "itd") -> ApiResponse[DashboardMetrics]:
        await simulate_api_delay(self.latency.delay_for("stats"))
        if time_filter not in {f.value for f in self.time_filters}:
            return ApiResponse.fail(f"Unknown time filter: {time_filter}")
        return ApiResponse.ok(self.metrics)
