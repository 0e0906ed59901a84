"""Pydantic models for Zendesk users, tickets and their list envelopes."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ZendeskModel(BaseModel):
    # Zendesk adds fields over time; keep whatever the API sends.
    model_config = ConfigDict(extra="allow")


class Via(ZendeskModel):
    channel: Optional[str] = None
    source: Dict[str, Any] = Field(default_factory=dict)


class User(ZendeskModel):
    id: Optional[int] = None
    url: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    active: Optional[bool] = None
    verified: Optional[bool] = None
    suspended: Optional[bool] = None
    organization_id: Optional[int] = None
    external_id: Optional[str] = None
    phone: Optional[str] = None
    time_zone: Optional[str] = None
    locale: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    user_fields: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Comment(ZendeskModel):
    id: Optional[int] = None
    type: Optional[str] = None
    author_id: Optional[int] = None
    body: Optional[str] = None
    html_body: Optional[str] = None
    plain_body: Optional[str] = None
    public: Optional[bool] = None
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
    via: Optional[Via] = None
    created_at: Optional[datetime] = None


class Ticket(ZendeskModel):
    id: Optional[int] = None
    url: Optional[str] = None
    external_id: Optional[str] = None
    type: Optional[str] = None
    subject: Optional[str] = None
    raw_subject: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    recipient: Optional[str] = None
    requester_id: Optional[int] = None
    submitter_id: Optional[int] = None
    assignee_id: Optional[int] = None
    organization_id: Optional[int] = None
    group_id: Optional[int] = None
    collaborator_ids: List[int] = Field(default_factory=list)
    follower_ids: List[int] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    custom_fields: List[Dict[str, Any]] = Field(default_factory=list)
    # Only meaningful on create/update: the comment to add
    comment: Optional[Comment] = None
    via: Optional[Via] = None
    due_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserEnvelope(ZendeskModel):
    user: User


class TicketEnvelope(ZendeskModel):
    ticket: Ticket


class Page(ZendeskModel):
    next_page: Optional[str] = None
    previous_page: Optional[str] = None
    count: Optional[int] = None

    @property
    def has_more(self) -> bool:
        return self.next_page is not None


class UserList(Page):
    users: List[User] = Field(default_factory=list)


class TicketList(Page):
    tickets: List[Ticket] = Field(default_factory=list)


class CommentList(Page):
    comments: List[Comment] = Field(default_factory=list)
