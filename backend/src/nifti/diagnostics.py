"""Structured diagnostics emitted alongside decoded volumes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

UNKNOWN_DATATYPE = "unknown_datatype"
NON_FINITE_SAMPLES = "non_finite_samples"
NEGATIVE_RESCALE_SLOPE = "negative_rescale_slope"
RANGE_OVERFLOW = "range_overflow"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
}


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    code: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)


class DiagnosticsCollector:
    """Collect diagnostics for one decode call and mirror them to logging.

    The collected events travel with the result so callers can detect
    degraded decodes without capturing log output.
    """

    def __init__(self, logger: logging.Logger, source: str | None = None) -> None:
        self._logger = logger
        self._source = source
        self._events: list[Diagnostic] = []

    def emit(self, severity: Severity, code: str, message: str, **context: Any) -> Diagnostic:
        if self._source is not None:
            context.setdefault("source", self._source)
        event = Diagnostic(severity=severity, code=code, message=message, context=context)
        self._events.append(event)
        self._logger.log(_LOG_LEVELS[severity], "%s (%s)", message, _format_context(context))
        return event

    def warning(self, code: str, message: str, **context: Any) -> Diagnostic:
        return self.emit(Severity.WARNING, code, message, **context)

    @property
    def events(self) -> tuple[Diagnostic, ...]:
        return tuple(self._events)


def _format_context(context: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}={value}" for key, value in sorted(context.items()))
