"""Export request, result and pagination models."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ProtocolVersion(str, Enum):
    """MasterData API generation."""

    V1 = "v1"
    V2 = "v2"


class StrategyName(str, Enum):
    """Retrieval strategy that produced an export."""

    CURSOR_SCROLL = "cursor_scroll"
    WINDOWED_SEARCH = "windowed_search"
    PAGED_SEARCH = "paged_search"


class StopReason(str, Enum):
    """Why a retrieval strategy stopped issuing batches."""

    EMPTY_BATCH = "empty_batch"
    END_OF_CURSOR = "end_of_cursor"
    CURSOR_CYCLE = "cursor_cycle"
    SHORT_BATCH = "short_batch"
    TOTAL_REACHED = "total_reached"
    BATCH_CAP = "batch_cap"


class Credentials(BaseModel):
    """Account name and app key/token pair, passed through on every call."""

    model_config = ConfigDict(frozen=True)

    account_name: str = Field(description="VTEX account (tenant) name")
    app_key: SecretStr = Field(description="X-VTEX-API-AppKey value")
    app_token: SecretStr = Field(description="X-VTEX-API-AppToken value")


class RetrievalRequest(BaseModel):
    """One export or page query against a single entity."""

    model_config = ConfigDict(frozen=True)

    credentials: Credentials
    version: ProtocolVersion = ProtocolVersion.V1
    entity: str = Field(description="Data entity acronym")
    schema_name: Optional[str] = Field(default=None, description="Explicit schema, if any")

    def with_schema(self, schema_name: Optional[str]) -> "RetrievalRequest":
        """Copy of this request targeting another schema."""
        return self.model_copy(update={"schema_name": schema_name})


class ExportResult(BaseModel):
    """Aggregated records of one export call.

    ``truncated`` is set when the batch cap was hit or the scroll cursor
    stopped advancing; the records are then a valid prefix.
    """

    model_config = ConfigDict(frozen=True)

    records: list[dict[str, Any]] = Field(default_factory=list)
    batches_issued: int = Field(default=0)
    truncated: bool = Field(default=False)
    strategy_used: StrategyName
    stop_reason: StopReason
    total: Optional[int] = Field(default=None, description="Total reported by the remote")
    schema_name: Optional[str] = Field(default=None)
    fallback_from: Optional[StrategyName] = Field(
        default=None,
        description="Primary strategy that failed before this result was produced",
    )
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime = Field(default_factory=datetime.now)

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()


class PaginationState(BaseModel):
    """Navigation metadata for a browsed page."""

    page: int
    page_size: int
    total: Optional[int] = None
    total_pages: Optional[int] = None
    has_previous: bool = False
    has_next: bool = False


class PageResult(BaseModel):
    """One page of records plus its pagination metadata."""

    records: list[dict[str, Any]] = Field(default_factory=list)
    pagination: PaginationState
    schema_name: Optional[str] = Field(
        default=None, description="Schema that produced the records"
    )


class Entity(BaseModel):
    """Data entity, optionally paired with one of its V2 schemas."""

    acronym: str
    name: Optional[str] = None
    schema_name: Optional[str] = None


class RateLimitDecision(BaseModel):
    """Outcome of a rate-limit check."""

    allowed: bool
    retry_after_ms: float
