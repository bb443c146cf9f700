"""Configuration loading and management."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from atlas.constants import (
    DEFAULT_MAX_READ_MB,
    DEFAULT_MODEL,
    DEFAULT_REVEAL_INTERVAL,
    DEFAULT_TEMPERATURE,
    SUPPORTED_MODELS,
)


@dataclass
class Config:
    """Atlas configuration.

    Loads from .env and optionally .atlas/config.json
    """

    # API Keys
    anthropic_api_key: Optional[str] = None

    # Model settings
    default_model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE

    # Status line pacing
    reveal_interval: float = DEFAULT_REVEAL_INTERVAL

    # Local forest loading
    max_read_mb: int = DEFAULT_MAX_READ_MB
    extra_ignores: list[str] = field(default_factory=list)

    # Transcript location
    log_dir: Path = field(default_factory=lambda: Path.home() / ".atlas")

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> "Config":
        """Load configuration from environment and project-specific config.

        Args:
            project_root: Project root directory (for .atlas/config.json)

        Returns:
            Config instance
        """
        load_dotenv()

        config = cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            default_model=os.getenv("ATLAS_DEFAULT_MODEL", DEFAULT_MODEL),
            temperature=float(os.getenv("ATLAS_TEMPERATURE", DEFAULT_TEMPERATURE)),
            reveal_interval=float(os.getenv("ATLAS_REVEAL_INTERVAL", DEFAULT_REVEAL_INTERVAL)),
            max_read_mb=int(os.getenv("ATLAS_MAX_READ_MB", DEFAULT_MAX_READ_MB)),
        )

        log_dir = os.getenv("ATLAS_LOG_DIR")
        if log_dir:
            config.log_dir = Path(log_dir).expanduser()

        # Load project-specific config if available
        if project_root:
            atlas_config_path = project_root / ".atlas" / "config.json"
            if atlas_config_path.exists():
                try:
                    with open(atlas_config_path) as f:
                        atlas_config = json.load(f)
                except (json.JSONDecodeError, OSError):
                    atlas_config = {}  # Ignore invalid config

                if isinstance(atlas_config, dict):
                    config.extra_ignores = list(atlas_config.get("ignore", []))
                    config.default_model = atlas_config.get("model", config.default_model)

        return config

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.anthropic_api_key:
            errors.append("No API key found. Set ANTHROPIC_API_KEY")

        if self.default_model not in SUPPORTED_MODELS:
            errors.append(f"Unsupported model: {self.default_model}")

        if not 0.0 <= self.temperature <= 1.0:
            errors.append("temperature must be between 0 and 1")

        if self.reveal_interval < 0:
            errors.append("reveal_interval must not be negative")

        if self.max_read_mb <= 0:
            errors.append("max_read_mb must be positive")

        return errors

    def to_dict(self) -> dict:
        """Convert config to dictionary (for logging/display)."""
        return {
            "default_model": self.default_model,
            "temperature": self.temperature,
            "reveal_interval": self.reveal_interval,
            "max_read_mb": self.max_read_mb,
            "extra_ignores": self.extra_ignores,
            "log_dir": str(self.log_dir),
            "has_anthropic_key": bool(self.anthropic_api_key),
        }
