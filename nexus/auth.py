"""Mock authentication session.

The login accepts any non-empty password. The role is taken from the email
domain and the signed in user is kept in key/value storage so that a new
session picks it up again.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional

from pydantic import ValidationError

from .config import LatencyConfig
from .errors import AuthenticationError
from .models import User
from .persistence import KeyValueStorage
from .services.base import simulate_api_delay, utcnow

logger = logging.getLogger(__name__)

ADMIN_DOMAIN = "@usebraintrust.com"
SE_DOMAIN = "@contractor.com"

Portal = Literal["admin", "client"]


def mock_user_for(email: str) -> User:
    """Build the user a mock login of ``email`` resolves to."""
    domain = email.lower()
    now = utcnow()
    common = dict(email=email, name=email.split("@")[0], created_at=now, updated_at=now)
    if domain.endswith(ADMIN_DOMAIN):
        return User(id="1", role="admin", **common)
    if domain.endswith(SE_DOMAIN):
        return User(id="2", role="se", assigned_clients=["client-1", "client-2"], **common)
    return User(id="3", role="client", company_id="client-1", **common)


def portal_for(user: Optional[User]) -> Optional[Portal]:
    """Portal a user lands on, or ``None`` when signed out."""
    if user is None:
        return None
    return "client" if user.role == "client" else "admin"


class AuthSession:
    """Signed in user backed by durable storage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str = "nexus_user",
        latency: Optional[LatencyConfig] = None,
    ) -> None:
        self.storage = storage
        self.storage_key = storage_key
        self.latency = latency or LatencyConfig()
        self.user: Optional[User] = None
        self.is_loading = True
        self._restore()

    def _restore(self) -> None:
        stored = self.storage.get_item(self.storage_key)
        if stored:
            try:
                self.user = User.model_validate_json(stored)
            except ValidationError as exc:
                logger.error(f"Failed to parse stored user data: {exc}")
                self.storage.remove_item(self.storage_key)
        self.is_loading = False

    async def login(self, email: str, password: str) -> User:
        """Sign in and persist the user.

        Raises:
            AuthenticationError: If ``email`` or ``password`` is empty.
        """
        email = (email or "").strip()
        if not email or not password:
            raise AuthenticationError("Email and password are required")

        self.is_loading = True
        try:
            await simulate_api_delay(self.latency.delay_for("login"))
            user = mock_user_for(email)
            self.storage.set_item(self.storage_key, user.model_dump_json(by_alias=True))
            self.user = user
        finally:
            self.is_loading = False
        logger.info(f"Signed in {email} as {user.role}")
        return user

    def logout(self) -> None:
        if self.user is not None:
            logger.info(f"Signed out {self.user.email}")
        self.user = None
        self.storage.remove_item(self.storage_key)

    @property
    def portal(self) -> Optional[Portal]:
        return portal_for(self.user)
