"""Structured logging setup for seed-vault."""
from __future__ import annotations

import logging
from typing import Dict

import structlog

_DEFAULT_LEVEL = "info"


def configure_logging(level: str | None = None, *, json_output: bool = False) -> None:
    """Configure structlog to write progress milestones to stdout.

    Console rendering is the default since the program is usually run by hand;
    ``json_output`` switches to one JSON object per line with ``ts``, ``level``
    and ``msg`` keys for log collectors (Lambda, CI).

    Loggers are not cached, so each call writes to whatever ``sys.stdout`` is
    at that moment.
    """

    numeric_level = _level_from_str((level or _DEFAULT_LEVEL).lower())

    processors = [
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(_rename_event_to_msg)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "seed_vault"):
    return structlog.get_logger(name)


def _rename_event_to_msg(
    _logger: structlog.BoundLoggerBase, _name: str, event_dict: dict[str, object]
) -> dict[str, object]:
    """Normalize the event field to ``msg`` for downstream consumers."""

    if "msg" not in event_dict:
        event_dict["msg"] = event_dict.pop("event", "")
    return event_dict


def _level_from_str(level: str) -> int:
    mapping: Dict[str, int] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
    }
    return mapping.get(level, logging.INFO)


__all__ = ["configure_logging", "get_logger"]
