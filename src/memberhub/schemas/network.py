# src/memberhub/schemas/network.py
"""Connection and relationship Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common import MemberSummary, Pagination


class ConnectionRequestCreate(BaseModel):
    """Schema for sending a connection request."""

    recipient_id: int


class ConnectionNoteResponse(BaseModel):
    id: int
    author_id: int | None
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommunicationLogResponse(BaseModel):
    id: int
    type: str
    date: datetime
    notes: str | None
    logged_by: int | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConnectionResponse(BaseModel):
    """Full connection record including relationship metadata."""

    id: int
    requester_id: int
    recipient_id: int
    status: str
    relationship_strength: str
    communication_preference: str
    last_contact: datetime | None
    last_communication_type: str | None
    next_follow_up: datetime | None
    tags: list[str]
    notes: list[ConnectionNoteResponse]
    communication_history: list[CommunicationLogResponse]
    last_activity: datetime
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RelationshipUpdate(BaseModel):
    """Partial relationship update; omitted fields are left unchanged."""

    next_follow_up: datetime | None = None
    notes: str | None = Field(None, description="Appended as a new note entry")
    relationship_strength: str | None = None
    communication_preference: str | None = None
    tags: list[str] | None = None


class CommunicationCreate(BaseModel):
    type: str
    notes: str | None = None
    follow_up_date: datetime | None = None


class FollowUpCreate(BaseModel):
    follow_up_date: datetime
    note: str | None = None


class NoteCreate(BaseModel):
    note: str


class DirectConnectionCreate(BaseModel):
    """Admin request to connect two members directly."""

    user_id_1: int
    user_id_2: int
    notes: str | None = None


class BulkConnectionItem(BaseModel):
    user_id_1: int | None = None
    user_id_2: int | None = None
    notes: str | None = None


class BulkConnectionsCreate(BaseModel):
    connections: list[BulkConnectionItem]


class BulkConnectionsResult(BaseModel):
    total: int
    successful: int
    failed: int
    errors: list[str]


class NetworkStats(BaseModel):
    total_connections: int
    pending_requests: int
    chapter_members: int


class ConnectionListItem(MemberSummary):
    connection_id: int
    mutual_connections: int
    connection_date: datetime | None


class RequestingMember(BaseModel):
    id: int
    name: str
    title: str | None = None
    company: str | None = None
    industry: str | None = None


class PendingRequestItem(BaseModel):
    id: int
    user: RequestingMember
    request_date: datetime


class ChapterMembersResponse(BaseModel):
    chapter_name: str
    location: str
    members: list[MemberSummary]


class RelationshipItem(BaseModel):
    """Accepted connection as seen from one of its members."""

    connection_id: int
    member: MemberSummary
    relationship_strength: str
    communication_preference: str
    last_contact: datetime | None
    last_communication_type: str | None
    next_follow_up: datetime | None
    tags: list[str]
    last_activity: datetime | None


class CommunicationItem(BaseModel):
    connection_id: int
    member: MemberSummary
    type: str
    date: datetime
    notes: str | None
    logged_by: int | None


class ChapterOption(BaseModel):
    id: int
    name: str
    location: str


class NetworkFilterOptions(BaseModel):
    chapters: list[ChapterOption]
    industries: list[str]


class PotentialConnection(BaseModel):
    id: int
    name: str
    title: str | None = None
    company: str | None = None
    industry: str | None = None
    match_reason: str


class SearchResult(MemberSummary):
    """Search row; which optional fields are set depends on its source subset."""

    connection_id: int | None = None
    connection_type: str | None = None
    mutual_connections: int | None = None
    connection_date: datetime | None = None
    request_date: datetime | None = None
    chapter_name: str | None = None
    location: str | None = None


class SearchResponse(BaseModel):
    results: list[SearchResult]
    pagination: Pagination
