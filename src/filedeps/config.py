"""Configuration management for filedeps."""

import logging
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .graph.models import SeverityPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Repository settings
    repo_path: Path = Field(
        default_factory=Path.cwd,
        description="Path to the project to index",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    extensions: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [".ts", ".tsx", ".js", ".jsx"],
        description=(
            "Source file extensions to index (comma-separated); extensionless "
            "imports also probe these after .ts, .tsx, .js and .jsx"
        ),
    )
    index_on_startup: bool = Field(
        default=True,
        description="Index the whole project when the server starts",
    )

    # Cycle severity scoring
    length_weight: float = Field(default=0.4, ge=0.0)
    dependent_weight: float = Field(default=0.6, ge=0.0)
    short_cycle_max: int = Field(default=2, ge=1)
    medium_cycle_max: int = Field(default=4, ge=1)
    short_cycle_score: float = Field(default=1.0, ge=0.0, le=1.0)
    medium_cycle_score: float = Field(default=0.6, ge=0.0, le=1.0)
    long_cycle_score: float = Field(default=0.3, ge=0.0, le=1.0)
    critical_threshold: float = Field(default=0.5, ge=0.0)
    moderate_threshold: float = Field(default=0.25, ge=0.0)

    @field_validator("extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated string into a list of dotted extensions."""
        if isinstance(v, str):
            v = [e.strip() for e in v.split(",") if e.strip()]
        return [e.lower() if e.startswith(".") else f".{e.lower()}" for e in v]

    @field_validator("repo_path", mode="before")
    @classmethod
    def validate_repo_path(cls, v: str | Path) -> Path:
        """Convert string to Path and validate it exists."""
        path = Path(v) if isinstance(v, str) else v
        if not path.exists():
            raise ValueError(f"Repository path does not exist: {path}")
        if not path.is_dir():
            raise ValueError(f"Repository path is not a directory: {path}")
        return path.resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @property
    def severity_policy(self) -> SeverityPolicy:
        """Build the cycle severity policy from the scoring settings."""
        return SeverityPolicy(
            length_weight=self.length_weight,
            dependent_weight=self.dependent_weight,
            short_cycle_max=self.short_cycle_max,
            medium_cycle_max=self.medium_cycle_max,
            short_cycle_score=self.short_cycle_score,
            medium_cycle_score=self.medium_cycle_score,
            long_cycle_score=self.long_cycle_score,
            critical_threshold=self.critical_threshold,
            moderate_threshold=self.moderate_threshold,
        )


def setup_logging(level: str) -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
