"""Structured logging for configuration resolution.

Purpose
    Report what ``smconfig`` does while it resolves a configuration (files read,
    sources folded, the environment picked, overrides harvested) through one
    package logger that stays silent until the host application wires handlers.

Contents
    - ``TRACE_ID``: context variable correlating events of one resolution.
    - ``get_logger`` / ``bind_trace_id``: logger access and trace binding.
    - ``log_debug`` / ``log_info`` / ``log_error``: level-specific emitters.
    - ``make_event``: builds the ``layer``/``path`` payload shared by events.
    - ``key_names``: turns override payloads into loggable key lists.

Every record carries its fields in ``record.context``. Override values may be
secrets, so callers pass them through :func:`key_names` and only key names are
ever logged.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("smconfig_trace_id", default=None)
"""Identifier attached to every record emitted in the current context."""

_LOGGER: Final[logging.Logger] = logging.getLogger("smconfig")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the ``smconfig`` logger; attach handlers to it to see resolution events."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Attach *trace_id* to subsequent records; ``None`` detaches it.

    Examples
    --------
    >>> bind_trace_id('req-7')
    >>> TRACE_ID.get()
    'req-7'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(layer: str, path: str | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the fields for an event about *layer*, optionally read from *path*.

    Examples
    --------
    >>> make_event('source', 'base.yaml', {'kind': 'FilePath'})
    {'layer': 'source', 'path': 'base.yaml', 'kind': 'FilePath'}
    """

    event: dict[str, Any] = {"layer": layer, "path": path}
    if payload:
        event.update(payload)
    return event


def key_names(payload: Mapping[str, Any], prefix: str = "") -> list[str]:
    """Return the sorted dotted leaf keys of *payload*, leaving values out.

    Examples
    --------
    >>> key_names({'db': {'password': 's3cret', 'port': 5432}, 'debug': 1})
    ['db.password', 'db.port', 'debug']
    """

    names: list[str] = []
    for key, value in payload.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping) and value:
            names.extend(key_names(value, dotted + "."))
        else:
            names.append(dotted)
    return sorted(names)


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    context: dict[str, Any] = {"trace_id": TRACE_ID.get(), **fields}
    _LOGGER.log(level, message, extra={"context": context})
