"""Data models for context definitions and controller snapshots."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ContextPhase(str, Enum):
    """Lifecycle phase of a context controller."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


# ============================================
# Catalog models
# ============================================


class ExampleQuery(BaseModel):
    """A canned query shipped with a context."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Query name")
    description: str = Field(default="", description="What the query shows")
    query: str = Field(description="TypeQL query text")


class ContextDefinition(BaseModel):
    """Schema and seed data for one named context."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique context name (e.g. 'social-network')")
    schema_text: str = Field(default="", description="TypeQL define statements")
    seed_text: str = Field(default="", description="TypeQL insert / match-insert statements")
    title: str = Field(default="", description="Display name")
    description: str = Field(default="", description="Human-readable description")
    example_queries: tuple[ExampleQuery, ...] = Field(
        default=(), description="Example queries to showcase the context"
    )

    @property
    def display_title(self) -> str:
        return self.title or self.name


# ============================================
# Controller snapshots
# ============================================


class ContextStatus(BaseModel):
    """Status snapshot delivered to status observers."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(description="Current context name")
    is_ready: bool = Field(description="Whether the context is ready for queries")
    is_loading: bool = Field(description="Whether a load is in progress")
    error: str | None = Field(default=None, description="Message of the last failed load")


class ContextState(BaseModel):
    """State snapshot mirrored into an external reactive store."""

    model_config = ConfigDict(frozen=True)

    current_context: str | None = None
    is_loading: bool = False
    last_error: str | None = None
    last_loaded_at: float | None = Field(
        default=None, description="Unix timestamp of the last successful load"
    )
