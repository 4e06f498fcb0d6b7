"""Structured logging setup for prompt-composer.

Library modules only call ``get_logger``; the CLI is the one place that
calls ``configure_logging``. Entries are JSON lines, one event per line::

    {"event": "template_unresolved_reference", "placeholder": "FOO", "level": "warning", ...}
"""

import os
from pathlib import Path
from typing import Any, Optional

import structlog

LOG_LEVEL_ENV = "PROMPT_COMPOSER_LOG_LEVEL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_FILE = Path.home() / ".cache" / "prompt-composer" / "logs" / "prompt-composer.log"


def _resolve_level(level: Optional[str]) -> str:
    # Explicit level, then environment, then INFO; unknown names fall back to INFO
    name = (level or os.environ.get(LOG_LEVEL_ENV, "INFO")).upper()
    return name if name in LOG_LEVELS else "INFO"


def configure_logging(log_file: Optional[Path] = None, level: Optional[str] = None) -> None:
    """
    Send structlog output to a JSON log file.

    Levels:
    - DEBUG: template lookups, cache hits, document commits
    - INFO: materializations, group replacements, raw-edit transitions
    - WARNING: unresolved or cyclic references, malformed placeholders
    - ERROR: companion file write failures

    Example:
        PROMPT_COMPOSER_LOG_LEVEL=DEBUG prompt-composer blocks my_template.txt
        tail -f ~/.cache/prompt-composer/logs/prompt-composer.log | jq .

    Args:
        log_file: Log file location (default ~/.cache/prompt-composer/logs/prompt-composer.log)
        level: Level name overriding PROMPT_COMPOSER_LOG_LEVEL (the CLI's --verbose passes DEBUG)
    """
    target = log_file or DEFAULT_LOG_FILE
    target.parent.mkdir(parents=True, exist_ok=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=target.open("a", encoding="utf-8")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Structured logger for a module, e.g. ``get_logger(__name__)``."""
    return structlog.get_logger(name)
