from .connection import Connection, ConnectionPage
from .validation import (
    CandidateInput,
    ErrorKind,
    FieldCheck,
    NormalizedConnection,
    ValidationOutcome,
)

__all__ = [
    "Connection",
    "ConnectionPage",
    "CandidateInput",
    "ErrorKind",
    "FieldCheck",
    "NormalizedConnection",
    "ValidationOutcome",
]
