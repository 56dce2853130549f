"""Exception types raised by the Nexus service layer."""

from __future__ import annotations


class NexusError(Exception):
    """Base class for Nexus errors."""


class InvalidQueryError(NexusError, ValueError):
    """Raised when a list query descriptor cannot be applied."""


class AuthenticationError(NexusError):
    """Raised when the mock login rejects the supplied credentials."""
