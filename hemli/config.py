"""
Centralized configuration for hemli.

All configuration is loaded from environment variables with sensible defaults.

Usage:
    from hemli.config import get_config
    cfg = get_config()
    print(cfg.index_path)    # "~/.local/share/hemli/index.json" or $HEMLI_INDEX_PATH
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_data_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(base) / "hemli"


@dataclass(frozen=True)
class Config:
    """Top-level hemli configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    index_path: Path = field(default_factory=lambda: _default_data_dir() / "index.json")
    log_level: str = "WARNING"


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    data_dir = Path(os.environ.get("HEMLI_DATA_DIR") or _default_data_dir()).expanduser()
    index_path = Path(os.environ.get("HEMLI_INDEX_PATH") or data_dir / "index.json").expanduser()

    return Config(
        data_dir=data_dir,
        index_path=index_path,
        log_level=os.environ.get("HEMLI_LOG_LEVEL", "WARNING").upper(),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
