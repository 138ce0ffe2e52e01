"""Application settings and configuration management."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    database_path: str = Field(
        default="data/registry.db",
        description="SQLite file holding the person and marriage tables",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/genealink.log", description="Main log file")

    # Tree resolution
    default_generations: int = Field(default=3, ge=0, le=10)
    max_generations: int = Field(
        default=6,
        ge=1,
        le=10,
        description="Upper bound accepted for a single build request",
    )
    max_ancestors_per_generation: int = Field(default=2, ge=1, le=2)
    max_descendants_per_generation: int = Field(default=20, ge=1, le=100)
    max_tree_nodes: int = Field(
        default=500,
        ge=1,
        le=10000,
        description="Node budget for one build or expansion",
    )
    traversal_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Deadline for one build or expansion (None = no deadline)",
    )

    # Search
    search_result_limit: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Candidates fetched from storage before ranking",
    )
    max_search_results: int = Field(default=50, ge=1, le=1000)
    phonetic_search_threshold: int = Field(
        default=20,
        ge=0,
        description="Respell the query terms when fewer candidates were found",
    )
    recency_window_days: int = Field(default=365, ge=1)

    @field_validator("database_path", "log_file")
    @classmethod
    def expand_user_path(cls, v: str) -> str:
        """Expand user home directory in paths."""
        return str(Path(v).expanduser())


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
