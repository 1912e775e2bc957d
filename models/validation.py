from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class ErrorKind(str, Enum):
    REQUIRED = "required"
    FORMAT = "format"
    TOO_LONG = "too_long"
    INVALID_CHARS = "invalid_chars"
    BAD_PREFIX = "bad_prefix"
    PARSE_ERROR = "parse_error"
    BAD_HOST = "bad_host"


class CandidateInput(BaseModel):
    """Raw, untrusted field values as submitted by a caller.

    Values are deliberately untyped: anything that is not a string is treated
    as absent by the validators.
    """

    email: Any = None
    name: Any = None
    linkedin_url: Any = None

    model_config = ConfigDict(extra="ignore")


class NormalizedConnection(BaseModel):
    """Canonical field values ready for persistence."""

    email: str
    name: str | None = None
    linkedin_url: str | None = None


@dataclass(frozen=True)
class FieldCheck:
    """Result of a single field validator."""

    kind: ErrorKind | None = None
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.kind is None

    @classmethod
    def ok(cls) -> "FieldCheck":
        return cls()

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> "FieldCheck":
        return cls(kind=kind, error=error)


@dataclass(frozen=True)
class ValidationOutcome:
    normalized: NormalizedConnection
    errors: Dict[str, str] = field(default_factory=dict)
    error_kinds: Dict[str, ErrorKind] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors
