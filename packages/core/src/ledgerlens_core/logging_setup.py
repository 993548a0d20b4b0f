"""Central structlog configuration.

Library modules only call ``structlog.get_logger()`` and never configure
output. Entry points such as the CLI call :func:`configure_logging` once at
startup.
"""

import logging
import sys
from typing import IO, Optional, Union

import structlog

_CONFIGURED = False


def _parse_level(level: Union[int, str, None]) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        numeric = getattr(logging, level.strip().upper(), None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(
    level: Union[int, str, None] = None,
    *,
    json_output: bool = False,
    stream: Optional[IO[str]] = None,
    force: bool = False,
) -> None:
    """Configure structlog exactly once.

    Args:
        level: Level as ``int`` or name (``"DEBUG"``). Defaults to INFO.
        json_output: Render events as JSON lines instead of console output.
        stream: Output stream, defaults to ``sys.stderr``.
        force: Reconfigure even if already configured (used by tests).
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_parse_level(level)),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )
    _CONFIGURED = True
