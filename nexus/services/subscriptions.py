"""Subscription plan service."""

from __future__ import annotations

from collections import Counter
from operator import attrgetter

from ..contracts import ApiResponse
from ..models import PlanStats, SubscriptionPlan
from ..query import QueryFields
from .base import ApiService

PLAN_FIELDS = QueryFields[SubscriptionPlan](
    search={
        "name": attrgetter("name"),
        "pricing_model": attrgetter("pricing_model"),
    },
    sort={
        "name": attrgetter("name"),
        "pricing_model": attrgetter("pricing_model"),
        "contract_length": attrgetter("contract_length"),
        "setup_fee": attrgetter("setup_fee"),
        "prepayment_percent": attrgetter("prepayment_percent"),
        "cap": attrgetter("cap"),
        "overage_cost": attrgetter("overage_cost"),
        "clients": attrgetter("clients"),
    },
)


class SubscriptionApiService(ApiService[SubscriptionPlan]):
    model = SubscriptionPlan
    entity = "Subscription plan"
    id_prefix = "plan"
    fields = PLAN_FIELDS

    async def get_stats(self) -> ApiResponse[PlanStats]:
        """Plan totals and the pricing model holding the most clients."""
        await self._delay("stats")
        plans = self.repository.list()
        clients_by_model: Counter[str] = Counter()
        for plan in plans:
            clients_by_model[plan.pricing_model] += plan.clients
        # most_common keeps first-seen order on ties
        most_popular = clients_by_model.most_common(1)
        stats = PlanStats(
            total_plans=len(plans),
            total_clients=sum(p.clients for p in plans),
            average_setup_fee=(sum(p.setup_fee for p in plans) / len(plans)) if plans else 0,
            most_popular_pricing_model=most_popular[0][0] if most_popular else "Fixed",
        )
        return ApiResponse.ok(stats)
