"""
Application settings with environment variable support.

All settings can be overridden via CLOCK_INVOICE_* environment variables.
User-level overrides saved with the config tool live in config.json
(see clock_invoice.utils.config) and take precedence over these.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Clock invoice configuration."""

    # Billing defaults
    default_rate: float = 80.0
    default_accuracy: int = Field(default=3, ge=0)
    default_time_display: Literal["hours", "duration"] = "hours"

    # Prefix for nested task headlines, repeated (level - 1) times
    indent_marker: str = "-"

    # Directory paths
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".mcp" / "clock-invoice"
    )

    model_config = {
        "env_prefix": "CLOCK_INVOICE_",
        "env_file": ".env",
        "extra": "ignore",
    }

    def ensure_dirs(self) -> None:
        """Create directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
