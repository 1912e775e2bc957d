from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

_COLUMNS = "id, created_at, created_by_email, email, name, linkedin_url"
_UPDATABLE = ("email", "name", "linkedin_url")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _rows_to_dicts(cur: sqlite3.Cursor, rows: Sequence[Any]) -> List[Dict[str, Any]]:
    keys = [d[0] for d in cur.description]
    return [{k: row[i] for i, k in enumerate(keys)} for row in rows]


class ConnectionsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def insert(
        self,
        created_by_email: str,
        email: str,
        name: Optional[str],
        linkedin_url: Optional[str],
    ) -> Dict[str, Any]:
        """Insert a contact row and return it.

        Raises sqlite3.IntegrityError when the owner already has this email.
        """
        row_id = str(uuid.uuid4())
        created_at = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        try:
            self.conn.execute(
                f"INSERT INTO hr_contacts ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                (row_id, created_at, created_by_email, email, name, linkedin_url),
            )
            self.conn.commit()
        except sqlite3.IntegrityError:
            self.conn.rollback()
            raise
        return {
            "id": row_id,
            "created_at": created_at,
            "created_by_email": created_by_email,
            "email": email,
            "name": name,
            "linkedin_url": linkedin_url,
        }

    def get_for_owner(self, connection_id: str, created_by_email: str) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute(
            f"SELECT {_COLUMNS} FROM hr_contacts WHERE id = ? AND created_by_email = ?",
            (connection_id, created_by_email),
        )
        row = cur.fetchone()
        if not row:
            return None
        return _rows_to_dicts(cur, [row])[0]

    def find_id_by_email(
        self,
        created_by_email: str,
        email: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[str]:
        """Return the id of the owner's contact with this email, if any."""
        sql = "SELECT id FROM hr_contacts WHERE created_by_email = ? AND email = ?"
        params: List[Any] = [created_by_email, email]
        if exclude_id:
            sql += " AND id != ?"
            params.append(exclude_id)
        cur = self.conn.cursor()
        cur.execute(sql + " LIMIT 1", params)
        row = cur.fetchone()
        return str(row[0]) if row else None

    def update(
        self,
        connection_id: str,
        created_by_email: str,
        fields: Dict[str, Optional[str]],
    ) -> Optional[Dict[str, Any]]:
        """Apply column updates to an owned row; returns the updated row."""
        updates = [(k, v) for k, v in fields.items() if k in _UPDATABLE]
        if updates:
            assignments = ", ".join(f"{k} = ?" for k, _ in updates)
            try:
                self.conn.execute(
                    f"UPDATE hr_contacts SET {assignments} WHERE id = ? AND created_by_email = ?",
                    (*[v for _, v in updates], connection_id, created_by_email),
                )
                self.conn.commit()
            except sqlite3.IntegrityError:
                self.conn.rollback()
                raise
        return self.get_for_owner(connection_id, created_by_email)

    def delete(self, connection_id: str, created_by_email: str) -> bool:
        cur = self.conn.execute(
            "DELETE FROM hr_contacts WHERE id = ? AND created_by_email = ?",
            (connection_id, created_by_email),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def list_for_owner(
        self,
        created_by_email: str,
        search: Optional[str] = None,
        limit: int = 50,
        cursor_created_at: Optional[str] = None,
        cursor_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Newest-first page of the owner's contacts using keyset pagination."""
        where = ["created_by_email = ?"]
        params: List[Any] = [created_by_email]
        if search:
            term = f"%{_escape_like(search)}%"
            where.append("(email LIKE ? ESCAPE '\\' OR name LIKE ? ESCAPE '\\')")
            params.extend([term, term])
        if cursor_created_at and cursor_id:
            where.append("(created_at < ? OR (created_at = ? AND id < ?))")
            params.extend([cursor_created_at, cursor_created_at, cursor_id])
        sql = (
            f"SELECT {_COLUMNS} FROM hr_contacts WHERE {' AND '.join(where)} "
            "ORDER BY created_at DESC, id DESC LIMIT ?"
        )
        params.append(limit)
        cur = self.conn.cursor()
        cur.execute(sql, params)
        return _rows_to_dicts(cur, cur.fetchall())

    def count_for_owner(self, created_by_email: str, since: Optional[str] = None) -> int:
        sql = "SELECT COUNT(*) FROM hr_contacts WHERE created_by_email = ?"
        params: List[Any] = [created_by_email]
        if since:
            sql += " AND created_at >= ?"
            params.append(since)
        cur = self.conn.cursor()
        cur.execute(sql, params)
        return int(cur.fetchone()[0])
