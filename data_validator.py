import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

from models.validation import (
    CandidateInput,
    ErrorKind,
    FieldCheck,
    NormalizedConnection,
    ValidationOutcome,
)

EMAIL_MAX_LENGTH = 320
NAME_MAX_LENGTH = 100
LINKEDIN_PREFIX = "https://www.linkedin.com/"
LINKEDIN_HOST = "www.linkedin.com"

# Local part, then dot-separated DNS labels (1-63 chars, no edge hyphens)
EMAIL_RE = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)
# Whitespace as ECMAScript defines it: \s minus \x1c-\x1f and \x85, plus BOM
NAME_RE = re.compile(r"(?:[a-zA-Z\-'.\ufeff]|[^\S\x1c-\x1f\x85])+")

EMAIL_REQUIRED = "Email is required"
EMAIL_FORMAT = "Please enter a valid email address"
EMAIL_TOO_LONG = "Email address is too long"
NAME_TOO_LONG = f"Name is too long (maximum {NAME_MAX_LENGTH} characters)"
NAME_INVALID_CHARS = "Name can only contain letters, spaces, hyphens, and apostrophes"
LINKEDIN_BAD_PREFIX = f"LinkedIn URL must start with {LINKEDIN_PREFIX}"
LINKEDIN_PARSE_ERROR = "Please enter a valid LinkedIn URL"
LINKEDIN_BAD_HOST = "LinkedIn URL must be from www.linkedin.com domain"

FIELDS: Tuple[str, ...] = ("email", "name", "linkedin_url")


def _clean(value: Any) -> Optional[str]:
    """Trim string input; anything else (or a blank string) becomes None."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def validate_email(email: Any) -> FieldCheck:
    trimmed = _clean(email)
    if trimmed is None:
        return FieldCheck.fail(ErrorKind.REQUIRED, EMAIL_REQUIRED)
    if not EMAIL_RE.fullmatch(trimmed):
        return FieldCheck.fail(ErrorKind.FORMAT, EMAIL_FORMAT)
    if len(trimmed) > EMAIL_MAX_LENGTH:
        return FieldCheck.fail(ErrorKind.TOO_LONG, EMAIL_TOO_LONG)
    return FieldCheck.ok()


def validate_name(name: Any) -> FieldCheck:
    """Name is optional; when given it must be short and made of letters."""
    trimmed = _clean(name)
    if trimmed is None:
        return FieldCheck.ok()
    if len(trimmed) > NAME_MAX_LENGTH:
        return FieldCheck.fail(ErrorKind.TOO_LONG, NAME_TOO_LONG)
    if not NAME_RE.fullmatch(trimmed):
        return FieldCheck.fail(ErrorKind.INVALID_CHARS, NAME_INVALID_CHARS)
    return FieldCheck.ok()


def validate_linkedin_url(url: Any) -> FieldCheck:
    """Validate an optional LinkedIn profile URL.

    Besides the literal prefix, the parsed hostname must be exactly
    ``www.linkedin.com``; look-alikes such as ``www.linkedin.com.attacker.net``
    are rejected.
    """
    trimmed = _clean(url)
    if trimmed is None:
        return FieldCheck.ok()
    if not trimmed.startswith(LINKEDIN_PREFIX):
        return FieldCheck.fail(ErrorKind.BAD_PREFIX, LINKEDIN_BAD_PREFIX)
    try:
        parts = urlsplit(trimmed)
        host = parts.hostname
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return FieldCheck.fail(ErrorKind.PARSE_ERROR, LINKEDIN_PARSE_ERROR)
    if host != LINKEDIN_HOST:
        return FieldCheck.fail(ErrorKind.BAD_HOST, LINKEDIN_BAD_HOST)
    return FieldCheck.ok()


def normalize_email(email: Any) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def normalize_name(name: Any) -> Optional[str]:
    return _clean(name)


def normalize_linkedin_url(url: Any) -> Optional[str]:
    return _clean(url)


def validate_connection(
    data: Union[Mapping[str, Any], CandidateInput],
) -> ValidationOutcome:
    """Validate and normalize a complete connection record.

    Every field is checked so callers can show all errors at once; the
    normalized values are computed even when some field failed.
    """
    if isinstance(data, CandidateInput):
        data = data.model_dump()
    elif not isinstance(data, Mapping):
        data = {}
    email = data.get("email")
    name = data.get("name")
    linkedin_url = data.get("linkedin_url")

    checks = {
        "email": validate_email(email),
        "name": validate_name(name),
        "linkedin_url": validate_linkedin_url(linkedin_url),
    }
    errors: Dict[str, str] = {}
    kinds: Dict[str, ErrorKind] = {}
    for field, check in checks.items():
        if not check.is_valid:
            errors[field] = check.error or ""
            kinds[field] = check.kind

    normalized = NormalizedConnection(
        email=normalize_email(email),
        name=normalize_name(name),
        linkedin_url=normalize_linkedin_url(linkedin_url),
    )
    return ValidationOutcome(normalized=normalized, errors=errors, error_kinds=kinds)


class ConnectionValidator:
    """Batch front-end over validate_connection that keeps running stats."""

    def __init__(self):
        self.validation_stats = {
            'total_connections': 0,
            'valid_connections': 0,
            'invalid_connections': 0,
            'errors_by_field': {f: 0 for f in FIELDS},
        }

    def validate(self, data: Union[Mapping[str, Any], CandidateInput]) -> ValidationOutcome:
        outcome = validate_connection(data)
        self.validation_stats['total_connections'] += 1
        if outcome.is_valid:
            self.validation_stats['valid_connections'] += 1
        else:
            self.validation_stats['invalid_connections'] += 1
            for field in outcome.errors:
                self.validation_stats['errors_by_field'][field] += 1
        return outcome

    def validate_all(
        self, records: List[Mapping[str, Any]]
    ) -> Tuple[List[ValidationOutcome], List[Dict[str, Any]]]:
        """Validate records; return (valid outcomes, rejects with their errors)."""
        valid: List[ValidationOutcome] = []
        rejected: List[Dict[str, Any]] = []

        logging.info(f"Starting validation of {len(records)} connections")

        for i, record in enumerate(records):
            outcome = self.validate(record)
            if outcome.is_valid:
                valid.append(outcome)
            else:
                logging.warning(f"Connection {i+1} validation failed: {outcome.errors}")
                rejected.append({'index': i, 'record': dict(record), 'errors': dict(outcome.errors)})

        logging.info(f"Validation completed. Valid: {len(valid)}, Invalid: {len(rejected)}")
        return valid, rejected

    def remove_duplicates(self, outcomes: List[ValidationOutcome]) -> List[ValidationOutcome]:
        """Drop repeated normalized emails, keeping the first occurrence."""
        seen = set()
        unique: List[ValidationOutcome] = []
        for outcome in outcomes:
            email = outcome.normalized.email
            if email in seen:
                continue
            seen.add(email)
            unique.append(outcome)

        duplicates_removed = len(outcomes) - len(unique)
        if duplicates_removed > 0:
            logging.info(f"Removed {duplicates_removed} duplicate connections")
        return unique

    def get_validation_stats(self) -> Dict:
        stats = dict(self.validation_stats)
        stats['errors_by_field'] = dict(self.validation_stats['errors_by_field'])
        return stats
