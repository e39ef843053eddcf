"""Data models for exports, pages and entities."""

from .export import (
    Credentials,
    Entity,
    ExportResult,
    PageResult,
    PaginationState,
    ProtocolVersion,
    RateLimitDecision,
    RetrievalRequest,
    StopReason,
    StrategyName,
)

__all__ = [
    "Credentials",
    "Entity",
    "ExportResult",
    "PageResult",
    "PaginationState",
    "ProtocolVersion",
    "RateLimitDecision",
    "RetrievalRequest",
    "StopReason",
    "StrategyName",
]
