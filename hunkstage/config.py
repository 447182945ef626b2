"""Configuration management for hunkstage"""

import logging
import os

from hunkstage.view.selection import SelectionMode


class StagingConfig:
    """Configuration for the command line staging session"""

    # Defaults (can be overridden via environment variables)
    DEFAULT_LOG_LEVEL = "WARNING"
    DEFAULT_MODE = SelectionMode.HUNK
    DEFAULT_CONTEXT_LINES = 3
    DEFAULT_WRAP_LISTS = False

    TRUTHY = {"1", "true", "yes", "on"}
    FALSY = {"0", "false", "no", "off"}

    @classmethod
    def get_log_level(cls) -> int:
        """
        Get the logging level for the CLI.

        Can be overridden via HUNKSTAGE_LOG_LEVEL (e.g. DEBUG, INFO).

        Returns:
            Numeric logging level (default: WARNING)
        """
        name = os.getenv("HUNKSTAGE_LOG_LEVEL", cls.DEFAULT_LOG_LEVEL).upper()
        level = logging.getLevelName(name)
        if isinstance(level, int):
            return level
        return logging.getLevelName(cls.DEFAULT_LOG_LEVEL)

    @classmethod
    def get_default_mode(cls) -> SelectionMode:
        """Initial selection granularity, from HUNKSTAGE_DEFAULT_MODE"""
        value = os.getenv("HUNKSTAGE_DEFAULT_MODE")
        if not value:
            return cls.DEFAULT_MODE
        try:
            return SelectionMode(value.lower())
        except ValueError:
            return cls.DEFAULT_MODE

    @classmethod
    def get_context_lines(cls) -> int:
        """
        Get the number of context lines requested from git diff.

        Can be overridden via HUNKSTAGE_CONTEXT_LINES.

        Returns:
            Non-negative number of lines (default: 3)
        """
        try:
            value = int(os.getenv("HUNKSTAGE_CONTEXT_LINES", cls.DEFAULT_CONTEXT_LINES))
        except ValueError:
            # If invalid value provided, return default
            return cls.DEFAULT_CONTEXT_LINES
        return value if value >= 0 else cls.DEFAULT_CONTEXT_LINES

    @classmethod
    def get_wrap_lists(cls) -> bool:
        """Whether list navigation wraps around, from HUNKSTAGE_WRAP_LISTS"""
        value = os.getenv("HUNKSTAGE_WRAP_LISTS", "").strip().lower()
        if value in cls.TRUTHY:
            return True
        if value in cls.FALSY:
            return False
        return cls.DEFAULT_WRAP_LISTS


# Global configuration instance
config = StagingConfig()
