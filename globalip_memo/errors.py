from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIG = "config"
    TRANSPORT = "transport"
    INVALID_DOCUMENT = "invalid_document"
    FIELD_NOT_FOUND = "field_not_found"
    PATTERN_INVALID = "pattern_invalid"
    CAPTURE_ABSENT = "capture_absent"
    ADDRESS_SYNTAX = "address_syntax"
    NO_CONSENSUS = "no_consensus"
    PERSISTENCE = "persistence"


# Tolerated per source; anything else ends the run.
SOURCE_ERROR_KINDS = frozenset(
    {
        ErrorKind.TRANSPORT,
        ErrorKind.INVALID_DOCUMENT,
        ErrorKind.FIELD_NOT_FOUND,
        ErrorKind.PATTERN_INVALID,
        ErrorKind.CAPTURE_ABSENT,
        ErrorKind.ADDRESS_SYNTAX,
    }
)


class GlobalIpError(RuntimeError):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def fatal(self) -> bool:
        return self.kind not in SOURCE_ERROR_KINDS

    def causes(self) -> list[str]:
        return cause_chain(self)[1:]


def cause_chain(exc: BaseException) -> list[str]:
    """Flatten an exception and its ``__cause__`` chain into messages, outermost first."""
    messages: list[str] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        messages.append(str(current) or type(current).__name__)
        current = current.__cause__ or (None if current.__suppress_context__ else current.__context__)
    return messages
