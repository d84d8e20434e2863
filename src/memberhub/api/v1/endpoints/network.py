# src/memberhub/api/v1/endpoints/network.py
"""Networking endpoints: connection requests, relationships and search."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from memberhub.api.v1.dependencies import ActorDep, CurrentUserDep, SessionDep
from memberhub.models import Connection
from memberhub.schemas.common import MessageResponse
from memberhub.schemas.network import (
    BulkConnectionsCreate,
    BulkConnectionsResult,
    ChapterMembersResponse,
    CommunicationCreate,
    CommunicationItem,
    ConnectionListItem,
    ConnectionRequestCreate,
    ConnectionResponse,
    DirectConnectionCreate,
    FollowUpCreate,
    NetworkFilterOptions,
    NetworkStats,
    NoteCreate,
    PendingRequestItem,
    PotentialConnection,
    RelationshipItem,
    RelationshipUpdate,
    SearchResponse,
)
from memberhub.services.connection_graph import ConnectionGraphService

router = APIRouter(prefix="/network", tags=["network"])


def get_graph(db: SessionDep) -> ConnectionGraphService:
    return ConnectionGraphService(db)


GraphDep = Annotated[ConnectionGraphService, Depends(get_graph)]


@router.get("/stats", response_model=NetworkStats)
async def network_stats(current_user: CurrentUserDep, graph: GraphDep) -> dict[str, int]:
    """Connection, request and chapter counts for the current member."""
    return graph.network_stats(current_user.id)


@router.get("/connections", response_model=list[ConnectionListItem])
async def list_connections(current_user: CurrentUserDep, graph: GraphDep) -> list[dict[str, Any]]:
    return graph.list_connections(current_user.id)


@router.get("/requests", response_model=list[PendingRequestItem])
async def pending_requests(current_user: CurrentUserDep, graph: GraphDep) -> list[dict[str, Any]]:
    """Requests awaiting the current member's answer."""
    return graph.pending_requests(current_user.id)


@router.get("/chapter-members", response_model=ChapterMembersResponse)
async def chapter_members(current_user: CurrentUserDep, graph: GraphDep) -> dict[str, Any]:
    return graph.chapter_members(current_user.id)


@router.get("/members", response_model=list[RelationshipItem])
async def list_members(
    current_user: CurrentUserDep,
    graph: GraphDep,
    strength: str | None = None,
    tag: str | None = None,
) -> list[dict[str, Any]]:
    """Accepted connections with relationship metadata."""
    return graph.list_members(current_user.id, strength=strength, tag=tag)


@router.get("/members/follow-ups", response_model=list[RelationshipItem])
async def follow_ups_due(
    current_user: CurrentUserDep,
    graph: GraphDep,
    days: Annotated[int | None, Query(ge=0)] = None,
) -> list[dict[str, Any]]:
    return graph.follow_ups_due(current_user.id, days)


@router.get("/members/recent", response_model=list[CommunicationItem])
async def recent_communications(
    current_user: CurrentUserDep,
    graph: GraphDep,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[dict[str, Any]]:
    return graph.recent_communications(current_user.id, limit)


@router.get("/members/key-relationships", response_model=list[RelationshipItem])
async def key_relationships(current_user: CurrentUserDep, graph: GraphDep) -> list[dict[str, Any]]:
    return graph.key_relationships(current_user.id)


@router.get("/filters", response_model=NetworkFilterOptions)
async def filter_options(_current_user: CurrentUserDep, graph: GraphDep) -> dict[str, Any]:
    return graph.filter_options()


@router.get("/potential-connections", response_model=list[PotentialConnection])
async def potential_connections(
    current_user: CurrentUserDep,
    graph: GraphDep,
) -> list[dict[str, Any]]:
    """Members sharing an industry or chapter who are not yet linked."""
    return graph.find_potential_connections(current_user.id)


@router.get("/search", response_model=SearchResponse)
async def search_network(
    current_user: CurrentUserDep,
    graph: GraphDep,
    query: str | None = None,
    search_type: Annotated[str, Query(alias="type")] = "all",
    industry: str | None = None,
    company: str | None = None,
    sort_by: str = "name",
    page: int = 1,
    limit: int | None = None,
) -> dict[str, Any]:
    """Search connections, incoming requests and chapter peers."""
    return graph.search(
        current_user.id,
        query=query,
        search_type=search_type,
        industry=industry,
        company=company,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )


@router.post(
    "/request",
    response_model=ConnectionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_request(
    request_data: ConnectionRequestCreate,
    actor: ActorDep,
    graph: GraphDep,
) -> Connection:
    """Send a connection request to another member."""
    return graph.send_request(actor, request_data.recipient_id)


@router.post("/request/{connection_id}/accept", response_model=ConnectionResponse)
async def accept_request(connection_id: int, actor: ActorDep, graph: GraphDep) -> Connection:
    return graph.accept(connection_id, actor)


@router.post("/request/{connection_id}/reject", response_model=ConnectionResponse)
async def reject_request(connection_id: int, actor: ActorDep, graph: GraphDep) -> Connection:
    return graph.reject(connection_id, actor)


@router.delete("/connection/{connection_id}", response_model=MessageResponse)
async def remove_connection(
    connection_id: int,
    _actor: ActorDep,
    graph: GraphDep,
) -> dict[str, str]:
    """Remove a connection in any status."""
    graph.remove(connection_id)
    return {"message": "Connection removed"}


@router.post(
    "/connection",
    response_model=ConnectionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_direct_connection(
    connection_data: DirectConnectionCreate,
    actor: ActorDep,
    graph: GraphDep,
) -> Connection:
    """Connect two members directly (admin only)."""
    return graph.create_direct_connection(
        actor,
        connection_data.user_id_1,
        connection_data.user_id_2,
        connection_data.notes,
    )


@router.post(
    "/connections/bulk",
    response_model=BulkConnectionsResult,
    status_code=status.HTTP_201_CREATED,
)
async def bulk_add_connections(
    bulk_data: BulkConnectionsCreate,
    actor: ActorDep,
    graph: GraphDep,
) -> dict[str, Any]:
    return graph.bulk_add_connections(
        actor,
        [item.model_dump() for item in bulk_data.connections],
    )


@router.put("/relationship/{connection_id}", response_model=ConnectionResponse)
async def update_relationship(
    connection_id: int,
    update_data: RelationshipUpdate,
    actor: ActorDep,
    graph: GraphDep,
) -> Connection:
    """Partially update relationship metadata; only sent fields change."""
    return graph.update_relationship(
        connection_id,
        actor,
        update_data.model_dump(exclude_unset=True),
    )


@router.post("/relationship/{connection_id}/communication", response_model=ConnectionResponse)
async def log_communication(
    connection_id: int,
    communication: CommunicationCreate,
    actor: ActorDep,
    graph: GraphDep,
) -> Connection:
    return graph.log_communication(
        connection_id,
        actor,
        communication.type,
        communication.notes,
        communication.follow_up_date,
    )


@router.post("/relationship/{connection_id}/follow-up", response_model=ConnectionResponse)
async def schedule_follow_up(
    connection_id: int,
    follow_up: FollowUpCreate,
    actor: ActorDep,
    graph: GraphDep,
) -> Connection:
    return graph.schedule_follow_up(
        connection_id,
        actor,
        follow_up.follow_up_date,
        follow_up.note,
    )


@router.post("/relationship/{connection_id}/note", response_model=ConnectionResponse)
async def add_note(
    connection_id: int,
    note_data: NoteCreate,
    actor: ActorDep,
    graph: GraphDep,
) -> Connection:
    return graph.add_note(connection_id, actor, note_data.note)
