"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables.

Optionally, point `ENV_FILE` at a local env file for development; nothing is
read from disk unless it is set.
"""

import os
from enum import Enum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from condition_studio.domain.enums import VALID_CHAIN_IDS, ChainId


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Every field has a default so the compiler and editor can be used as a
    library without any environment set up.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "condition-studio"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"

    # Metrics token for protecting /metrics endpoint
    metrics_token: str | None = None

    # Compiler
    # Strict mode turns "absent" results for unsupported or incomplete
    # conditions into CompilationError and validates the final document.
    compiler_strict_mode: bool = False
    # Used only when no chain value was entered on a condition block
    compiler_default_chain_id: int = ChainId.SEPOLIA.value

    # Block tree limits for trees received over the API
    block_tree_max_depth: int = 16
    block_tree_max_nodes: int = 500

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def default_chain(self) -> ChainId:
        """Default chain as an enum member."""
        return ChainId(self.compiler_default_chain_id)

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("compiler_default_chain_id")
    @classmethod
    def validate_default_chain(cls, v: int) -> int:
        """The fallback chain must itself be a supported chain."""
        if v not in VALID_CHAIN_IDS:
            raise ValueError(
                f"compiler_default_chain_id must be one of "
                f"{', '.join(str(c) for c in VALID_CHAIN_IDS)}, got {v}"
            )
        return v

    @field_validator("block_tree_max_depth", "block_tree_max_nodes")
    @classmethod
    def validate_positive_limit(cls, v: int) -> int:
        """Tree limits must be positive."""
        if v < 1:
            raise ValueError("block tree limits must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        These checks prevent insecure configurations from being deployed to production.
        """
        if self.app_env == AppEnvironment.PROD:
            if self.observability_enabled and not self.metrics_token:
                raise ValueError("METRICS_TOKEN must be set in production")

            for origin in self.cors_origins_list:
                if "localhost" in origin or "127.0.0.1" in origin:
                    raise ValueError(
                        f"CORS origins must not contain localhost in production: {origin}"
                    )

        return self


settings = Settings()
