"""Diagnostic messages reported while laying out a circuit."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Union


class SeverityLevel(enum.IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2


@dataclass(frozen=True)
class ErrorCode:
    code: str
    severity: SeverityLevel
    template: str

    def format(self, *args: object) -> "DiagnosticMessage":
        return DiagnosticMessage(self.severity, self.code, self.template.format(*args))


@dataclass(frozen=True)
class DiagnosticMessage:
    severity: SeverityLevel
    code: str
    message: str

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return f"{self.severity.name.lower()} {self.code}: {self.message}"


class ErrorCodes:
    """Catalogue of the diagnostics emitted by the layout engine."""

    NO_UNKNOWNS_TO_SOLVE = ErrorCode(
        "SOL001", SeverityLevel.INFO, "No unknowns to solve; the layout is trivial"
    )
    CONFLICTING_OFFSET = ErrorCode(
        "SOL002",
        SeverityLevel.WARNING,
        "Cannot apply offset {0:g} for {1}: the nodes are already coincident",
    )
    UNSATISFIABLE_MINIMUM = ErrorCode(
        "SOL003",
        SeverityLevel.WARNING,
        "Cannot satisfy minimum {0:g} for {1}: the nodes are already coincident",
    )
    COULD_NOT_FIND_COORDINATE = ErrorCode(
        "UW001", SeverityLevel.WARNING, "Could not find coordinate {0} of {1} in the solved values"
    )
    COULD_NOT_CONSTRAIN_ORIENTATION = ErrorCode(
        "ORI001", SeverityLevel.ERROR, "Could not constrain orientation of pin {0}"
    )
    COULD_NOT_FIND_COMPONENT = ErrorCode(
        "PIN001", SeverityLevel.ERROR, "Could not find component '{0}' referenced by {1}"
    )
    COULD_NOT_FIND_PIN = ErrorCode(
        "PIN002", SeverityLevel.ERROR, "Could not find pin '{0}' on component '{1}' referenced by {2}"
    )
    UNDEFINED_WIRE_SEGMENT = ErrorCode(
        "WIR001", SeverityLevel.WARNING, "Segment {0} of wire {1} has no direction; assuming a horizontal segment"
    )


_LOG_LEVELS = {
    SeverityLevel.INFO: logging.INFO,
    SeverityLevel.WARNING: logging.WARNING,
    SeverityLevel.ERROR: logging.ERROR,
}


class DiagnosticHandler:
    """Collects diagnostic messages."""

    def __init__(self) -> None:
        self.messages: List[DiagnosticMessage] = []

    def post(self, message: Union[DiagnosticMessage, ErrorCode], *args: object) -> DiagnosticMessage:
        if isinstance(message, ErrorCode):
            message = message.format(*args)
        self.messages.append(message)
        self.on_message(message)
        return message

    def on_message(self, message: DiagnosticMessage) -> None:
        pass

    def of_severity(self, severity: SeverityLevel) -> List[DiagnosticMessage]:
        return [message for message in self.messages if message.severity == severity]

    def codes(self) -> List[str]:
        return [message.code for message in self.messages]

    @property
    def has_errors(self) -> bool:
        return any(message.severity >= SeverityLevel.ERROR for message in self.messages)

    def __iter__(self) -> Iterator[DiagnosticMessage]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)


class LoggingDiagnosticHandler(DiagnosticHandler):
    """Diagnostic handler that also forwards every message to a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        super().__init__()
        self.logger = logger or logging.getLogger("circuit_layout.diagnostics")

    def on_message(self, message: DiagnosticMessage) -> None:
        self.logger.log(_LOG_LEVELS[message.severity], "%s: %s", message.code, message.message)


def post(diagnostics: Optional[DiagnosticHandler], code: ErrorCode, *args: object) -> None:
    """Post ``code`` to ``diagnostics`` when a handler is available."""

    if diagnostics is not None:
        diagnostics.post(code, *args)


__all__ = [
    "DiagnosticHandler",
    "DiagnosticMessage",
    "ErrorCode",
    "ErrorCodes",
    "LoggingDiagnosticHandler",
    "SeverityLevel",
    "post",
]
