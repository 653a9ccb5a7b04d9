"""CLI module for the media optimizer."""

from .commands import ProcessCommands, UtilityCommands
from .main import MediaOptimizerCLI

__all__ = [
    "MediaOptimizerCLI",
    "ProcessCommands",
    "UtilityCommands",
]
