"""
Logger Utility
==============

Context-aware logging for agents, tools and workflows.

Every module creates its own Logger with a short context name so the
output of a multi-agent run can be followed line by line:

    [2026-01-31T10:30:00] [INFO] [Agent:The Working Agent] Turn 2 started
    [2026-01-31T10:30:01] [DEBUG] [ToolExecutor] Executing tool: calculate_tool

The minimum level is read from LOG_LEVEL and can be changed at bootstrap
with set_log_level(). The level is global, so loggers created at import
time pick up the value configured later in main().

Usage:
    from agentchain.utils.logger import Logger

    logger = Logger("Workflow")
    logger.info("Starting workflow", {"agents": 2})

    agent_logger = Logger("Agent").child("Verifier")
    agent_logger.debug("Sending transcript")
"""

import json
import os
import sys
from datetime import datetime
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Log levels with numeric values for comparison."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


class Colors:
    """ANSI escape codes for colored terminal output."""
    RESET = "\033[0m"
    DEBUG = "\033[36m"    # Cyan
    INFO = "\033[32m"     # Green
    WARNING = "\033[33m"  # Yellow
    ERROR = "\033[31m"    # Red
    DIM = "\033[2m"


_LEVEL_NAMES = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "WARN": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
}


def parse_log_level(value: str | None) -> LogLevel:
    """
    Parse a level name such as "debug" or "WARN".

    Unknown or empty values fall back to INFO.
    """
    if not value:
        return LogLevel.INFO
    return _LEVEL_NAMES.get(value.strip().upper(), LogLevel.INFO)


_min_level: LogLevel = parse_log_level(os.getenv("LOG_LEVEL"))
_use_color: bool = sys.stdout.isatty()


def set_log_level(level: str | LogLevel) -> None:
    """
    Set the minimum level for every logger in the process.

    Args:
        level: A LogLevel or a level name ("debug", "info", ...)
    """
    global _min_level
    _min_level = level if isinstance(level, LogLevel) else parse_log_level(level)


def get_log_level() -> LogLevel:
    """Return the current global minimum level."""
    return _min_level


class Logger:
    """
    A context-aware logger with colored output.

    Example:
        logger = Logger("Workflow")
        logger.info("Running agent 1 of 2")

        child = logger.child("Calculation Workflow")
        child.debug("Trace entry", {"agent": "worker", "chars": 42})
    """

    def __init__(self, context: str = ""):
        """
        Initialize a logger.

        Args:
            context: Prefix shown on every line (e.g. "Agent", "Tools")
        """
        self.context = context

    def child(self, child_context: str) -> "Logger":
        """Create a logger whose context is nested under this one."""
        new_context = f"{self.context}:{child_context}" if self.context else child_context
        return Logger(new_context)

    def _format_message(self, level: str, message: str, color: str) -> str:
        timestamp = datetime.now().isoformat(timespec="seconds")
        context_str = f"[{self.context}] " if self.context else ""

        if not _use_color:
            return f"[{timestamp}] [{level}] {context_str}{message}"

        return (
            f"{Colors.DIM}[{timestamp}]{Colors.RESET} "
            f"{color}[{level}]{Colors.RESET} "
            f"{context_str}{message}"
        )

    def _log(
        self,
        level: LogLevel,
        level_name: str,
        color: str,
        message: str,
        data: dict[str, Any] | None = None
    ) -> None:
        if level < _min_level:
            return

        formatted = self._format_message(level_name, message, color)

        # Logs go to stderr so stdout carries only the workflow result
        stream = sys.stderr
        print(formatted, file=stream)

        if data:
            data_str = json.dumps(data, indent=2, default=str)
            if _use_color:
                data_str = f"{Colors.DIM}{data_str}{Colors.RESET}"
            print(data_str, file=stream)

    def debug(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log a debug message (shown only when LOG_LEVEL=DEBUG)."""
        self._log(LogLevel.DEBUG, "DEBUG", Colors.DEBUG, message, data)

    def info(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log an info message."""
        self._log(LogLevel.INFO, "INFO", Colors.INFO, message, data)

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log a warning message."""
        self._log(LogLevel.WARNING, "WARN", Colors.WARNING, message, data)

    def error(self, message: str, error: BaseException | None = None) -> None:
        """
        Log an error message.

        Args:
            message: The error message
            error: Optional exception; its type, text and cause are printed
        """
        data = None
        if error:
            data = {
                "error_type": type(error).__name__,
                "error_message": str(error),
            }
            cause = error.__cause__
            if cause is not None:
                data["cause_type"] = type(cause).__name__
                data["cause_message"] = str(cause)
        self._log(LogLevel.ERROR, "ERROR", Colors.ERROR, message, data)


logger = Logger("agentchain")
