from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'db.repos.connections_repo'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    from config.settings import get_settings

    monkeypatch.delenv("OWNER_EMAIL", raising=False)
    monkeypatch.delenv("DEFAULT_PAGE_SIZE", raising=False)
    monkeypatch.delenv("MAX_PAGE_SIZE", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_conn(tmp_path):
    from db import schema
    from db.connection import get_connection

    conn = get_connection(str(tmp_path / "t.db"))
    schema.bootstrap(conn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def service(db_conn):
    from db.repos.connections_repo import ConnectionsRepo
    from services.connections_service import ConnectionsService

    return ConnectionsService(ConnectionsRepo(db_conn))
