"""Analyzer configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Analyzer settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROTOGETTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_env: str = "development"
    log_level: str = "INFO"

    # Analysis
    mode: str = "standalone"  # standalone | aggregator
    getter_prefix: str = "Get"
    generated_marker: str = "Code generated"

    # Source discovery
    file_extension: str = ".go"
    max_file_size: int = 1 * 1024 * 1024  # 1MB
    skip_dirs: List[str] = [
        ".git", "vendor", "node_modules", "testdata", "third_party",
        ".idea", ".vscode", "dist", "build",
    ]

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    @field_validator("getter_prefix", mode="after")
    @classmethod
    def validate_getter_prefix(cls, v: str) -> str:
        """Accessor prefix must be an exported Go identifier fragment."""
        if not v or not v.isidentifier() or not v[0].isupper():
            raise ValueError("getter_prefix must be a non-empty exported identifier, e.g. 'Get'")
        return v

    @field_validator("file_extension", mode="after")
    @classmethod
    def validate_file_extension(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError("file_extension must start with a dot")
        return v

    @field_validator("mode", mode="after")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        allowed = {"standalone", "aggregator"}
        if v.lower() not in allowed:
            raise ValueError(f"mode must be one of {sorted(allowed)}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
