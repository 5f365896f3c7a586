"""
Playback configuration.

Provides:
- PlayerConfig dataclass
- Loading/saving from JSON and environment variables
- Applying the logging settings
"""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from .logging_config import configure_logging

DEFAULT_RATE = 1.0
DEFAULT_FPS = 60.0


@dataclass
class PlayerConfig:
    """Player and logging configuration."""

    # Virtual milliseconds per wall-clock millisecond
    rate: float = DEFAULT_RATE

    # Host loop tick rate used by Player.run()
    fps: float = DEFAULT_FPS

    log_level: str = "INFO"
    log_format: str = "text"  # text or json

    def __post_init__(self):
        # Out-of-range values are clamped rather than rejected
        self.rate = max(0.0, float(self.rate))
        self.fps = float(self.fps)
        if self.fps <= 0:
            self.fps = DEFAULT_FPS

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerConfig":
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_env(cls) -> "PlayerConfig":
        """Load configuration from environment variables."""
        return cls(
            rate=float(os.environ.get("PLAYBACK_RATE", str(DEFAULT_RATE))),
            fps=float(os.environ.get("PLAYBACK_FPS", str(DEFAULT_FPS))),
            log_level=os.environ.get("PLAYBACK_LOG_LEVEL", "INFO"),
            log_format=os.environ.get("PLAYBACK_LOG_FORMAT", "text"),
        )

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "PlayerConfig":
        """Load configuration from JSON file. A missing file yields defaults."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)


# Default config file location
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "playback" / "config.json"


def load_config(path: Optional[Path] = None) -> PlayerConfig:
    """Load configuration from file or return defaults."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    return PlayerConfig.load(path)


def save_config(config: PlayerConfig, path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    config.save(path)


def setup_logging(config: PlayerConfig) -> None:
    """Install the root log handler described by ``config``."""
    configure_logging(config.log_level, config.log_format)
