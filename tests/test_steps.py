from __future__ import annotations

from pipelines.runner import Pipeline, RunContext
from pipelines.steps.persist_connections import PersistConnections
from pipelines.steps.validate_connections import ValidateConnections
from services.mapping import map_to_candidate

OWNER = "recruiter@reachpilot.io"


def test_map_to_candidate_accepts_aliases():
    mapped = map_to_candidate({
        'Email': 'Jane@Corp.com',
        'Contact_Name': 'Jane Doe',
        'LinkedIn_Profile': 'https://www.linkedin.com/in/jane',
        'Company': 'Acme',
    })
    assert mapped == {
        'email': 'Jane@Corp.com',
        'name': 'Jane Doe',
        'linkedin_url': 'https://www.linkedin.com/in/jane',
    }


def test_validate_connections_splits_and_dedupes():
    ctx = RunContext(records=[
        {'email': ' Jane@Corp.com '},
        {'email': 'jane@corp.com', 'name': 'Dup'},
        {'email': 'nope'},
        'not a record',
    ])
    out = ValidateConnections().run(ctx)
    assert out.records == [{'email': 'jane@corp.com', 'name': None, 'linkedin_url': None}]
    assert out.meta['duplicates_in_batch'] == 1
    assert [r['index'] for r in out.meta['rejected']] == [2, 3]
    assert out.meta['validation_stats']['invalid_connections'] == 2


def test_pipeline_persists_and_skips_existing(service):
    service.create_connection(OWNER, {'email': 'existing@corp.com'})
    ctx = RunContext(owner_email=OWNER, records=[
        {'email': 'existing@corp.com'},
        {'email': 'new@corp.com', 'full_name': 'New Person'},
    ])
    out = Pipeline([ValidateConnections(), PersistConnections(service)]).run(ctx)
    assert out.meta['processed_connections'] == 1
    assert out.meta['skipped_duplicates'] == 1
    page = service.list_connections(OWNER)
    assert sorted(c.email for c in page.data) == ['existing@corp.com', 'new@corp.com']
    assert {c.email: c.name for c in page.data}['new@corp.com'] == 'New Person'
