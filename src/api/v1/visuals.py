"""Visual endpoints: table refreshes and user interaction events."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.dependencies import get_sync_service
from src.api.v1.schemas.graph import ConnectRequest, ExpandRequest, GraphResponse, SelectionRequest
from src.graph.state import CommitDrag, ConnectNodes, ExpandNode, RefreshTable, SelectNode
from src.models.schemas import Position, SessionState, Table
from src.services.sync_service import GraphSyncService
from src.utils.logging import bind_visual, get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/visuals", tags=["visuals"])


def to_response(visual_id: str, state: SessionState, applied: bool = True) -> GraphResponse:
    live = state.live
    return GraphResponse(
        visual_id=visual_id,
        applied=applied,
        selection=state.selection,
        data_ready=state.data_ready,
        nodes=live.nodes,
        edges=live.edges,
        node_count=len(live.nodes),
        edge_count=len(live.edges),
    )


@router.get("/{visual_id}/graph", response_model=GraphResponse)
async def get_graph(
    visual_id: str,
    service: GraphSyncService = Depends(get_sync_service),
) -> GraphResponse:
    """Current live graph; opens the session from the stored layout if needed."""
    bind_visual(visual_id)
    state = await service.open_session(visual_id)
    return to_response(visual_id, state)


@router.post("/{visual_id}/table", response_model=GraphResponse)
async def refresh_table(
    visual_id: str,
    table: Table,
    service: GraphSyncService = Depends(get_sync_service),
) -> GraphResponse:
    bind_visual(visual_id)
    transition = await service.apply(visual_id, RefreshTable(table=table))
    return to_response(visual_id, transition.state, transition.applied)


@router.post("/{visual_id}/nodes/{node_id}/position", response_model=GraphResponse)
async def commit_drag(
    visual_id: str,
    node_id: str,
    position: Position,
    service: GraphSyncService = Depends(get_sync_service),
) -> GraphResponse:
    bind_visual(visual_id, node_id=node_id)
    transition = await service.apply(visual_id, CommitDrag(node_id=node_id, position=position))
    return to_response(visual_id, transition.state, transition.applied)


@router.post("/{visual_id}/edges", response_model=GraphResponse)
async def connect_nodes(
    visual_id: str,
    body: ConnectRequest,
    service: GraphSyncService = Depends(get_sync_service),
) -> GraphResponse:
    bind_visual(visual_id)
    transition = await service.apply(visual_id, ConnectNodes(source=body.source, target=body.target))
    return to_response(visual_id, transition.state, transition.applied)


@router.post("/{visual_id}/selection", response_model=GraphResponse)
async def select_node(
    visual_id: str,
    body: SelectionRequest,
    service: GraphSyncService = Depends(get_sync_service),
) -> GraphResponse:
    bind_visual(visual_id)
    transition = await service.apply(visual_id, SelectNode(node_id=body.node_id))
    # selection is applied even though nothing is redrawn
    return to_response(visual_id, transition.state, transition.state.selection == body.node_id)


@router.post("/{visual_id}/expand", response_model=GraphResponse)
async def expand_node(
    visual_id: str,
    body: ExpandRequest,
    service: GraphSyncService = Depends(get_sync_service),
) -> GraphResponse:
    bind_visual(visual_id, node_id=body.node_id)
    transition = await service.apply(visual_id, ExpandNode(node_id=body.node_id, table=body.table))
    return to_response(visual_id, transition.state, transition.applied)


@router.post("/{visual_id}/flush")
async def flush_layout(
    visual_id: str,
    service: GraphSyncService = Depends(get_sync_service),
) -> dict:
    failed = await service.flush(visual_id)
    logger.info("layout_flushed", visual_id=visual_id, ok=not failed)
    return {"visualId": visual_id, "flushed": not failed}


@router.delete("/{visual_id}")
async def close_visual(
    visual_id: str,
    service: GraphSyncService = Depends(get_sync_service),
) -> dict:
    """Flush pending writes and drop the visual's in-memory session."""
    bind_visual(visual_id)
    closed = await service.close_session(visual_id)
    return {"visualId": visual_id, "closed": closed}
