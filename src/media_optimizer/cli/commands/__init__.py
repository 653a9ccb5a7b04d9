"""CLI command modules."""

from .process import PROCESS_COMMANDS, ProcessCommands
from .utils import UTILITY_COMMANDS, UtilityCommands

__all__ = ["PROCESS_COMMANDS", "UTILITY_COMMANDS", "ProcessCommands", "UtilityCommands"]
