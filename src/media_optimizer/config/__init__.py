"""Configuration management for the media optimizer."""

from __future__ import annotations

from .constants import *  # noqa: F403, F401
from .settings import MediaOptimizerConfig, get_config

__all__ = [
    "MediaOptimizerConfig",
    "get_config",
]
