"""Export orchestration, page browsing and inbound rate limiting."""

from .entity_catalog import EntityCatalog
from .export_orchestrator import (
    ClientFactory,
    ExportOrchestrator,
    default_client_factory,
)
from .page_query import SinglePageQuery, build_pagination
from .rate_limiter import (
    FixedWindowRateLimiter,
    RateLimitEntry,
    client_key,
    get_rate_limiter,
    rate_limit_key,
)
from .service import ExportService

__all__ = [
    # Orchestrator
    "ExportOrchestrator",
    "ClientFactory",
    "default_client_factory",
    # Page query
    "SinglePageQuery",
    "build_pagination",
    # Entities
    "EntityCatalog",
    # Service
    "ExportService",
    # Rate Limiter
    "FixedWindowRateLimiter",
    "RateLimitEntry",
    "client_key",
    "get_rate_limiter",
    "rate_limit_key",
]
