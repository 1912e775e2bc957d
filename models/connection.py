from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Connection(BaseModel):
    """App/DB record shape for a stored HR/recruiter contact."""

    id: str
    created_at: str
    created_by_email: str
    email: str
    name: str | None = None
    linkedin_url: str | None = None

    model_config = ConfigDict(extra="ignore")


class ConnectionPage(BaseModel):
    """One page of a newest-first connection listing."""

    data: list[Connection] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None
