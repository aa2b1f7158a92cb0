"""Nested pydantic-settings configuration for the application.

Each sub-config reads its own ``SIMCASE_<GROUP>_*`` env vars::

    export SIMCASE_GENERATION_MODEL=anthropic/claude-3-7-sonnet-20250219
    export SIMCASE_GENERATION_API_KEY=sk-ant-...
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class GenerationConfig(BaseSettings):
    """Generative text service configuration.

    Env vars use ``SIMCASE_GENERATION_`` prefix.
    """

    model_config = {"env_prefix": "SIMCASE_GENERATION_"}

    provider: Literal["anthropic", "openai", "perplexity", "ollama", "litellm"] = "anthropic"
    model: str = "anthropic/claude-3-7-sonnet-20250219"
    api_key: str = ""
    fallback_model: str | None = None
    fallback_api_key: str = ""
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(default=4000, gt=0)
    timeout: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    max_total_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=2.0, ge=0.0)
    retry_max_delay: float = Field(default=30.0, ge=0.0)
    timeout_growth: float = Field(default=1.5, ge=1.0)
    test_mode: bool = False


class StructuringConfig(BaseSettings):
    """Document structuring configuration.

    Env vars use ``SIMCASE_STRUCTURING_`` prefix.
    """

    model_config = {"env_prefix": "SIMCASE_STRUCTURING_"}

    summary_max_chars: int = Field(default=500, gt=0)
    default_title: str = "Healthcare Simulation Case"


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``SIMCASE_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "SIMCASE_OBSERVABILITY_"}

    service_name: str = "simcase"
    log_level: str = "INFO"


class APIConfig(BaseSettings):
    """HTTP API configuration.

    Env vars use ``SIMCASE_API_`` prefix.
    """

    model_config = {"env_prefix": "SIMCASE_API_"}

    title: str = "simcase"
    description: str = "Simulation case generation and structuring"
    port: int = 8080


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    generation: GenerationConfig = GenerationConfig()
    structuring: StructuringConfig = StructuringConfig()
    observability: ObservabilityConfig = ObservabilityConfig()
    api: APIConfig = APIConfig()
