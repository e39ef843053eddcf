"""Retrieval strategies for MasterData pagination idioms."""

from typing import Optional

from .base_strategy import RetrievalStrategy, StrategyOptions, records_from_response
from .cursor_scroll import CursorScrollStrategy
from .paged_search import PagedSearchStrategy
from .schema_resolver import SchemaResolver
from .windowed_search import Window, WindowedSearchStrategy, window_bounds
from ..types.export import ProtocolVersion, StrategyName

__all__ = [
    "RetrievalStrategy",
    "StrategyOptions",
    "records_from_response",
    "CursorScrollStrategy",
    "WindowedSearchStrategy",
    "PagedSearchStrategy",
    "SchemaResolver",
    "Window",
    "window_bounds",
    "STRATEGIES",
    "get_strategy",
    "strategy_for_version",
    "fallback_for",
    "list_strategies",
]

# Registry of available strategies
STRATEGIES: dict[StrategyName, type[RetrievalStrategy]] = {
    StrategyName.CURSOR_SCROLL: CursorScrollStrategy,
    StrategyName.WINDOWED_SEARCH: WindowedSearchStrategy,
    StrategyName.PAGED_SEARCH: PagedSearchStrategy,
}

# Primary strategy per protocol version, and its single fallback hop
PRIMARY_STRATEGY = {
    ProtocolVersion.V1: StrategyName.CURSOR_SCROLL,
    ProtocolVersion.V2: StrategyName.PAGED_SEARCH,
}
FALLBACK_STRATEGY = {
    StrategyName.CURSOR_SCROLL: StrategyName.WINDOWED_SEARCH,
}


def get_strategy(name: StrategyName) -> type[RetrievalStrategy]:
    """Get strategy class by name."""
    if name not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {name}. Available: {list_strategies()}")
    return STRATEGIES[name]


def strategy_for_version(version: ProtocolVersion) -> type[RetrievalStrategy]:
    """Primary strategy class for a protocol version."""
    return get_strategy(PRIMARY_STRATEGY[version])


def fallback_for(name: StrategyName) -> Optional[type[RetrievalStrategy]]:
    """Fallback strategy class for a primary strategy, if one exists."""
    fallback = FALLBACK_STRATEGY.get(name)
    return get_strategy(fallback) if fallback else None


def list_strategies() -> list[str]:
    """Get list of available strategy names."""
    return [name.value for name in STRATEGIES]
