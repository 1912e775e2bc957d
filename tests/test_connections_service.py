from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from services.errors import (
    BadRequest,
    DuplicateEmail,
    NotFound,
    Unauthorized,
    ValidationFailed,
)

OWNER = "recruiter@reachpilot.io"


def test_create_persists_normalized_values(service):
    created = service.create_connection(OWNER, {
        "email": " Jane@Corp.COM ",
        "name": " Jane Doe ",
        "linkedin_url": " https://www.linkedin.com/in/janedoe ",
    })
    assert created.email == "jane@corp.com"
    assert created.name == "Jane Doe"
    assert created.linkedin_url == "https://www.linkedin.com/in/janedoe"
    assert created.created_by_email == OWNER
    assert uuid.UUID(created.id).version == 4
    assert service.get_connection(OWNER, created.id) == created


def test_create_requires_owner(service):
    with pytest.raises(Unauthorized) as exc:
        service.create_connection("  ", {"email": "a@b.com"})
    assert exc.value.status == 401


def test_create_rejects_non_object_body(service):
    with pytest.raises(BadRequest):
        service.create_connection(OWNER, ["a@b.com"])


def test_create_validation_error_lists_fields(service):
    with pytest.raises(ValidationFailed) as exc:
        service.create_connection(OWNER, {"email": "bad", "name": "123", "linkedin_url": "nope"})
    err = exc.value
    assert err.status == 422
    assert set(err.details) == {"email", "name", "linkedin_url"}
    assert err.to_dict()["error"] == "validation_error"


def test_create_duplicate_email_conflicts(service):
    service.create_connection(OWNER, {"email": "jane@corp.com"})
    with pytest.raises(DuplicateEmail) as exc:
        service.create_connection(OWNER, {"email": " JANE@corp.com"})
    assert exc.value.status == 409
    # Different owner is unaffected
    service.create_connection("other@reachpilot.io", {"email": "jane@corp.com"})


def test_get_rejects_bad_id_and_foreign_rows(service):
    created = service.create_connection(OWNER, {"email": "jane@corp.com"})
    with pytest.raises(NotFound) as exc:
        service.get_connection(OWNER, "not-a-uuid")
    assert exc.value.message == "Invalid connection ID format"
    with pytest.raises(NotFound):
        service.get_connection("other@reachpilot.io", created.id)
    with pytest.raises(NotFound):
        service.get_connection(OWNER, str(uuid.uuid4()))


def test_update_merges_with_stored_values(service):
    created = service.create_connection(OWNER, {
        "email": "jane@corp.com",
        "name": "Jane",
        "linkedin_url": "https://www.linkedin.com/in/jane",
    })
    updated = service.update_connection(OWNER, created.id, {"name": "  Jane Doe "})
    assert updated.name == "Jane Doe"
    assert updated.email == "jane@corp.com"
    assert updated.linkedin_url == "https://www.linkedin.com/in/jane"

    cleared = service.update_connection(OWNER, created.id, {"linkedin_url": "", "name": None})
    assert cleared.linkedin_url is None
    assert cleared.name == "Jane Doe"


def test_update_without_fields_returns_current(service):
    created = service.create_connection(OWNER, {"email": "jane@corp.com"})
    assert service.update_connection(OWNER, created.id, {}) == created


def test_update_validation_and_conflict(service):
    first = service.create_connection(OWNER, {"email": "jane@corp.com"})
    second = service.create_connection(OWNER, {"email": "john@corp.com"})

    with pytest.raises(ValidationFailed) as exc:
        service.update_connection(OWNER, second.id, {"name": "J0hn"})
    assert set(exc.value.details) == {"name"}

    with pytest.raises(DuplicateEmail):
        service.update_connection(OWNER, second.id, {"email": "Jane@Corp.com"})

    # Re-submitting its own email (different case) is not a conflict
    same = service.update_connection(OWNER, first.id, {"email": "JANE@corp.com"})
    assert same.email == "jane@corp.com"


def test_update_missing_row(service):
    with pytest.raises(NotFound):
        service.update_connection(OWNER, str(uuid.uuid4()), {"name": "X"})


def test_delete(service):
    created = service.create_connection(OWNER, {"email": "jane@corp.com"})
    with pytest.raises(NotFound):
        service.delete_connection("other@reachpilot.io", created.id)
    service.delete_connection(OWNER, created.id)
    with pytest.raises(NotFound):
        service.get_connection(OWNER, created.id)


def test_list_paginates_newest_first(service):
    emails = [f"person{i}@corp.com" for i in range(5)]
    for e in emails:
        service.create_connection(OWNER, {"email": e})
    service.create_connection("other@reachpilot.io", {"email": "hidden@corp.com"})

    page = service.list_connections(OWNER, limit=2)
    assert [c.email for c in page.data] == ["person4@corp.com", "person3@corp.com"]
    assert page.has_more is True and page.next_cursor

    seen = [c.email for c in page.data]
    cursor = page.next_cursor
    while cursor:
        page = service.list_connections(OWNER, limit="2", cursor=cursor)
        seen.extend(c.email for c in page.data)
        cursor = page.next_cursor
    assert seen == list(reversed(emails))
    assert page.has_more is False


def test_list_limit_and_cursor_fallbacks(service, monkeypatch):
    from config.settings import get_settings

    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "3")
    monkeypatch.setenv("MAX_PAGE_SIZE", "4")
    get_settings.cache_clear()
    for i in range(6):
        service.create_connection(OWNER, {"email": f"p{i}@corp.com"})

    assert len(service.list_connections(OWNER, limit="abc").data) == 3
    assert len(service.list_connections(OWNER, limit=0).data) == 3
    assert len(service.list_connections(OWNER, limit=50).data) == 4
    page = service.list_connections(OWNER, limit=10, cursor="garbage")
    assert len(page.data) == 4 and page.has_more is True


def test_list_search(service):
    service.create_connection(OWNER, {"email": "jane@corp.com", "name": "Jane Doe"})
    service.create_connection(OWNER, {"email": "john@other.org", "name": "John Roe"})
    page = service.list_connections(OWNER, search="  doe ")
    assert [c.email for c in page.data] == ["jane@corp.com"]
    page = service.list_connections(OWNER, search="OTHER.org")
    assert [c.email for c in page.data] == ["john@other.org"]


def test_stats_counts_current_month(service, db_conn):
    service.create_connection(OWNER, {"email": "new@corp.com"})
    old = service.create_connection(OWNER, {"email": "old@corp.com"})
    db_conn.execute(
        "UPDATE hr_contacts SET created_at = ? WHERE id = ?",
        ("2020-01-15T10:00:00.000000+00:00", old.id),
    )
    db_conn.commit()
    stats = service.connection_stats(OWNER, now=datetime.now(timezone.utc))
    assert stats == {"total_connections": 2, "added_this_month": 1}
