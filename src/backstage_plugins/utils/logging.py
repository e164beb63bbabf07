# ABOUTME: Structured logging with correlation IDs for the Backstage backend plugins
# ABOUTME: Configures structlog for the proxy server and the catalog sync command

"""
Structured logging with correlation IDs.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

Both components in this package log through structlog:

1. The Argo CD proxy logs every lookup it forwards, tagged with the
   correlation ID of the HTTP request that triggered it.
2. The Okta entity providers log one line per skipped group or member, so a
   broken naming strategy shows up in the logs instead of aborting a run.

A correlation ID links every log line produced while handling one request
(or one synchronization run). It lives in a ContextVar so concurrent asyncio
tasks each see their own value.
"""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, TextIO

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping


correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """
    Get current correlation ID or generate a new one.

    Code running outside a request (startup, a sync run started from the
    command line) still gets an ID, so its logs are correlatable too.

    Returns:
        8-character correlation ID string.
    """
    cid = correlation_id.get()
    if not cid:
        cid = str(uuid.uuid4())[:8]
        correlation_id.set(cid)
    return cid


def set_correlation_id(cid: str) -> None:
    """
    Set correlation ID for current context.

    Args:
        cid: The correlation ID to set. An empty string makes the next
             get_correlation_id() call generate a fresh one.
    """
    correlation_id.set(cid)


def add_correlation_id(
    logger: structlog.types.WrappedLogger,  # noqa: ARG001 - Required by structlog Processor API
    method_name: str,  # noqa: ARG001 - Required by structlog Processor API
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor adding the correlation ID to every event."""
    event_dict["correlation_id"] = get_correlation_id()
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging.

    Call it once at startup. Calling it again reconfigures logging.

    PROCESSOR PIPELINE:
    -------------------
    1. merge_contextvars: Adds values bound with bind_contextvars()
    2. add_log_level: Adds "level" field
    3. TimeStamper: Adds ISO-format timestamp
    4. add_correlation_id: Adds the correlation ID
    5. Renderer: JSON lines or colored console output

    Args:
        level: Logging level name ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL").
        json_output: Render JSON lines (production) instead of console text.
        stream: Where log lines go. Defaults to stdout.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )
