from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InstantiationSettings(BaseSettings):
    """Configure tracing and graph limits of an ``InstantiationService``.

    Values can come from keyword arguments or from ``SERVICEWIRE_*``
    environment variables, for example ``SERVICEWIRE_TRACING_ENABLED=1``.
    Child scopes share the settings object of their parent.
    """

    model_config = SettingsConfigDict(env_prefix="SERVICEWIRE_", frozen=True)

    tracing_enabled: bool = False
    """Record invocation and creation traces into the trace reporter."""

    trace_threshold_ms: float = Field(default=2.0, ge=0)
    """Keep traces slower than this even when they created nothing."""

    max_traversal: int = Field(default=1000, gt=0)
    """Upper bound on dependency nodes enumerated for one resolution."""


__all__ = ["InstantiationSettings"]
