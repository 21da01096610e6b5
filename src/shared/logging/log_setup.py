"""
Centralized logging configuration using structlog with colorful console output.
"""

import logging
import sys
from typing import Any, Optional

import colorama
import structlog
from structlog.dev import Column, ConsoleRenderer, KeyValueColumnFormatter

_LEVEL_NAMES = {
    "debug": "DEBUG",
    "info": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
    "critical": "CRITICAL",
}

_LEVEL_NUMBERS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
    "critical": 50,
}


def _build_console_renderer() -> ConsoleRenderer:
    """Colored column layout: level, time, logger, event, then key/values."""
    def column(key: str, value_style: str, key_style: Optional[str] = None) -> Column:
        return Column(
            key,
            KeyValueColumnFormatter(
                key_style=key_style,
                value_style=value_style,
                reset_style=colorama.Style.RESET_ALL,
                value_repr=str,
            ),
        )
    
    return ConsoleRenderer(
        columns=[
            column("level", colorama.Style.BRIGHT + colorama.Fore.WHITE),
            column("timestamp", colorama.Fore.YELLOW),
            column("logger", colorama.Fore.CYAN),
            column("event", colorama.Style.BRIGHT + colorama.Fore.MAGENTA),
            # catch-all for the remaining context
            column("", colorama.Fore.GREEN, key_style=colorama.Style.DIM + colorama.Fore.CYAN),
        ]
    )


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
) -> None:
    """
    Configure structured logging for the pipeline, the robot and the web API.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: 'console' for colored columns, 'json' for one JSON object per line
    """
    current_log_level = getattr(logging, log_level.upper(), logging.INFO)
    
    def level_filter(logger, name, event_dict):
        """Filter events based on log level."""
        if _LEVEL_NUMBERS.get(name.lower(), 20) < current_log_level:
            raise structlog.DropEvent
        return event_dict
    
    def add_logger_info(logger, name, event_dict):
        """Add level from the method name; logger name comes from the bound context."""
        event_dict["level"] = _LEVEL_NAMES.get(name, name.upper())
        event_dict.setdefault("logger", "app")
        return event_dict
    
    if log_format == "json":
        processors = [
            level_filter,
            add_logger_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # initialize colorama for cross-platform color support (especially Windows)
        colorama.init()
        processors = [
            level_filter,
            add_logger_info,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _build_console_renderer(),
        ]
    
    structlog.configure(
        processors=processors,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.
    
    Args:
        name: Logger name (usually __name__)
        
    Returns:
        Logger bound to the short module name
    """
    short_name = name.split('.')[-1] if '.' in name else name
    return structlog.get_logger().bind(logger=short_name)


def log_run_progress(
    logger: structlog.BoundLogger,
    phase: str,
    execution_id: str,
    current: Optional[int] = None,
    total: Optional[int] = None,
    **extra_context: Any
) -> None:
    """
    Log robot run progress with structured data.
    
    Args:
        logger: Logger instance
        phase: Phase the run is in
        execution_id: Identifier of the run
        current: Items processed so far in this phase
        total: Items to process in this phase
        **extra_context: Additional context data
    """
    context = {
        "phase": phase,
        "execution_id": execution_id,
    }
    
    if current is not None and total is not None:
        context["progress"] = f"{current}/{total}"
    elif current is not None:
        context["current"] = str(current)
    
    context.update(extra_context)
    
    logger.info("run_progress", **context)
