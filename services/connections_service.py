from __future__ import annotations

import logging
import re
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from config.settings import get_settings
from data_validator import FIELDS, validate_connection
from models.connection import Connection, ConnectionPage
from ports.repos import ConnectionsRepoPort
from services.errors import (
    BadRequest,
    DuplicateEmail,
    NotFound,
    Unauthorized,
    ValidationFailed,
)

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def _require_owner(owner_email: Optional[str]) -> str:
    owner = (owner_email or "").strip().lower() if isinstance(owner_email, str) else ""
    if not owner:
        raise Unauthorized()
    return owner


def _require_payload(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise BadRequest("Request body must be a JSON object")
    return payload


def parse_limit(value: Any, default: int, maximum: int) -> int:
    """Parse a page size; invalid or < 1 falls back to default, capped at maximum."""
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed < 1:
        return default
    return min(parsed, maximum)


def parse_cursor(cursor: Optional[str]) -> Optional[Tuple[str, str]]:
    """Split a "<created_at>|<id>" cursor; malformed cursors yield None."""
    if not cursor:
        return None
    parts = str(cursor).split("|")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        logging.warning(f"Invalid cursor format: {cursor}")
        return None
    return parts[0].strip(), parts[1].strip()


class ConnectionsService:
    """Owner-scoped CRUD over stored connections.

    All write paths go through validate_connection and persist only the
    normalized values. Errors are raised as ConnectionServiceError subclasses.
    """

    def __init__(self, repo: ConnectionsRepoPort):
        self.repo = repo

    def _get_owned(self, owner: str, connection_id: Any) -> Dict[str, Any]:
        if not isinstance(connection_id, str) or not _UUID_RE.match(connection_id):
            raise NotFound("Invalid connection ID format")
        row = self.repo.get_for_owner(connection_id, owner)
        if not row:
            raise NotFound()
        return row

    def list_connections(
        self,
        owner_email: Optional[str],
        search: Optional[str] = "",
        limit: Any = None,
        cursor: Optional[str] = None,
    ) -> ConnectionPage:
        owner = _require_owner(owner_email)
        settings = get_settings()
        page_size = parse_limit(limit, settings.default_page_size, settings.max_page_size)
        after = parse_cursor(cursor)
        rows = self.repo.list_for_owner(
            owner,
            search=(search or "").strip() or None,
            limit=page_size + 1,
            cursor_created_at=after[0] if after else None,
            cursor_id=after[1] if after else None,
        )
        has_more = len(rows) > page_size
        rows = rows[:page_size]
        next_cursor = None
        if has_more and rows:
            last = rows[-1]
            next_cursor = f"{last['created_at']}|{last['id']}"
        return ConnectionPage(
            data=[Connection(**r) for r in rows],
            has_more=has_more,
            next_cursor=next_cursor,
        )

    def get_connection(self, owner_email: Optional[str], connection_id: Any) -> Connection:
        owner = _require_owner(owner_email)
        return Connection(**self._get_owned(owner, connection_id))

    def create_connection(self, owner_email: Optional[str], payload: Any) -> Connection:
        owner = _require_owner(owner_email)
        body = _require_payload(payload)

        outcome = validate_connection(body)
        if not outcome.is_valid:
            raise ValidationFailed(details=dict(outcome.errors))

        normalized = outcome.normalized
        if self.repo.find_id_by_email(owner, normalized.email):
            raise DuplicateEmail()
        try:
            row = self.repo.insert(owner, normalized.email, normalized.name, normalized.linkedin_url)
        except sqlite3.IntegrityError as e:
            raise DuplicateEmail() from e
        logging.info(
            f"Created connection {row['id']}",
            extra={"step": "create_connection", "status": "ok", "owner": owner},
        )
        return Connection(**row)

    def update_connection(
        self,
        owner_email: Optional[str],
        connection_id: Any,
        payload: Any,
    ) -> Connection:
        """Apply a partial update.

        Keys missing from the payload (or set to None) keep their stored value.
        An empty string clears an optional field.
        """
        owner = _require_owner(owner_email)
        existing = self._get_owned(owner, connection_id)
        body = _require_payload(payload)

        provided = {f: body[f] for f in FIELDS if body.get(f) is not None}
        if not provided:
            return Connection(**existing)

        merged = {f: provided.get(f, existing.get(f)) for f in FIELDS}
        outcome = validate_connection(merged)
        if not outcome.is_valid:
            raise ValidationFailed(details=dict(outcome.errors))

        normalized = outcome.normalized
        if "email" in provided and normalized.email != (existing.get("email") or "").lower():
            if self.repo.find_id_by_email(owner, normalized.email, exclude_id=connection_id):
                raise DuplicateEmail()

        fields = {f: getattr(normalized, f) for f in provided}
        try:
            row = self.repo.update(connection_id, owner, fields)
        except sqlite3.IntegrityError as e:
            raise DuplicateEmail() from e
        if not row:
            raise NotFound()
        logging.info(
            f"Updated connection {connection_id} fields={sorted(fields)}",
            extra={"step": "update_connection", "status": "ok", "owner": owner},
        )
        return Connection(**row)

    def delete_connection(self, owner_email: Optional[str], connection_id: Any) -> None:
        owner = _require_owner(owner_email)
        self._get_owned(owner, connection_id)
        if not self.repo.delete(connection_id, owner):
            raise NotFound()
        logging.info(
            f"Deleted connection {connection_id}",
            extra={"step": "delete_connection", "status": "ok", "owner": owner},
        )

    def connection_stats(
        self,
        owner_email: Optional[str],
        now: Optional[datetime] = None,
    ) -> Dict[str, int]:
        owner = _require_owner(owner_email)
        now = now or datetime.now(timezone.utc)
        month_start = now.astimezone(timezone.utc).replace(
            day=1, hour=0, minute=0, second=0, microsecond=0
        )
        return {
            "total_connections": self.repo.count_for_owner(owner),
            "added_this_month": self.repo.count_for_owner(
                owner, since=month_start.isoformat(timespec="microseconds")
            ),
        }
