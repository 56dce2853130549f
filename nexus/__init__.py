"""Braintrust Nexus: service layer for the workflow automation dashboard."""

from .app import Nexus, get_app
from .auth import AuthSession, portal_for
from .contracts import ApiResponse, PaginatedResponse, Pagination
from .fixtures import FixtureStore, seed_store
from .persistence import get_storage
from .query import ListQuery, run_query

__version__ = "0.1.0"
__all__ = [
    "ApiResponse",
    "AuthSession",
    "FixtureStore",
    "ListQuery",
    "Nexus",
    "PaginatedResponse",
    "Pagination",
    "get_app",
    "get_storage",
    "portal_for",
    "run_query",
    "seed_store",
]
