"""Pydantic models for Redmine API data.

These models represent the JSON documents returned by the Redmine REST API
and the issue body sent back on create and update.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Resource(BaseModel):
    """A reference to another object, identified by id only."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = Field(default=None, description="Numeric identifier")


class NamedResource(Resource):
    """A reference that also carries a display name (status, tracker, user...)."""

    name: str | None = Field(default=None, description="Display name")

    def __str__(self) -> str:
        return self.name or (f"#{self.id}" if self.id is not None else "-")


class Issue(BaseModel):
    """An issue as returned by ``/issues.json`` and ``/issues/{id}.json``."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Issue id")
    subject: str = Field(default="", description="Issue title")
    description: str | None = Field(default=None, description="Issue body")

    project: NamedResource | None = Field(default=None)
    tracker: NamedResource | None = Field(default=None)
    status: NamedResource | None = Field(default=None)
    priority: NamedResource | None = Field(default=None)
    author: NamedResource | None = Field(default=None)
    assigned_to: NamedResource | None = Field(default=None, description="Assignee")
    fixed_version: NamedResource | None = Field(default=None, description="Target release")
    parent: Resource | None = Field(default=None, description="Parent issue")

    start_date: str | None = Field(default=None)
    done_ratio: int | None = Field(default=None)
    custom_fields: list[dict[str, Any]] = Field(default_factory=list)
    created_on: str | None = Field(default=None)
    updated_on: str | None = Field(default=None)

    @property
    def status_id(self) -> int:
        return self.status.id if self.status and self.status.id is not None else 0

    @property
    def priority_id(self) -> int:
        return self.priority.id if self.priority and self.priority.id is not None else 0


class Membership(BaseModel):
    """A project membership; group memberships have no user."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = Field(default=None)
    user: NamedResource | None = Field(default=None)
    group: NamedResource | None = Field(default=None)


class IssueBody(BaseModel):
    """The ``issue`` object sent on POST and PUT.

    Unset fields are left out of the payload, so a PUT only touches the
    fields that were given.
    """

    project_id: int | None = None
    tracker_id: int | None = None
    status_id: int | None = None
    priority_id: int | None = None
    subject: str | None = None
    description: str | None = None
    category_id: int | None = None
    fixed_version_id: int | None = None
    assigned_to_id: int | None = None
    parent_issue_id: int | None = None
    watcher_user_ids: list[int] | None = None
    is_private: bool | None = None
    estimated_hours: float | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the request document, ``{"issue": {...}}``."""
        return {"issue": self.model_dump(exclude_none=True)}

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


__all__ = [
    "Resource",
    "NamedResource",
    "Issue",
    "Membership",
    "IssueBody",
]
