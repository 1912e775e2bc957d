from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create the contacts schema and indexes (idempotent)."""
    cur = conn.cursor()

    # Emails are compared case-insensitively, like citext
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS hr_contacts (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  created_at TEXT NOT NULL,\n"
            "  created_by_email TEXT NOT NULL COLLATE NOCASE,\n"
            "  email TEXT NOT NULL COLLATE NOCASE,\n"
            "  name TEXT,\n"
            "  linkedin_url TEXT,\n"
            "  CONSTRAINT unique_user_contact_email UNIQUE (created_by_email, email)\n"
            ")"
        )
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS idx_hr_contacts_created_by_email ON hr_contacts(created_by_email);"
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS idx_hr_contacts_created_at ON hr_contacts(created_at DESC, id DESC);"
    )

    conn.commit()
