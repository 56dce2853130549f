"""User management service."""

from __future__ import annotations

from operator import attrgetter

from ..contracts import ApiResponse
from ..models import User, UserStats
from ..query import QueryFields
from .base import ApiService

USER_FIELDS = QueryFields[User](
    search={
        "name": attrgetter("name"),
        "email": attrgetter("email"),
    },
    sort={
        "name": attrgetter("name"),
        "email": attrgetter("email"),
        "role": attrgetter("role"),
        "cost_rate": attrgetter("cost_rate"),
        "bill_rate": attrgetter("bill_rate"),
        "created_at": attrgetter("created_at"),
        "updated_at": attrgetter("updated_at"),
    },
    filters={"role": attrgetter("role")},
)


class UserApiService(ApiService[User]):
    model = User
    entity = "User"
    id_prefix = "user"
    fields = USER_FIELDS

    async def get_stats(self) -> ApiResponse[UserStats]:
        await self._delay("stats")
        users = self.repository.list()
        roles = [u.role for u in users]
        stats = UserStats(
            total_users=len(users),
            total_admins=roles.count("admin"),
            total_ses=roles.count("se"),
            total_clients=roles.count("client"),
        )
        return ApiResponse.ok(stats)
