"""Graph export endpoints: JSON, GraphML and PNG of a visual's live graph."""

from __future__ import annotations

import json
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from src.api.dependencies import get_sync_service
from src.api.graph_image import render_graph_image
from src.models.schemas import GraphSnapshot
from src.services.sync_service import GraphSyncService
from src.utils.exceptions import SessionNotFoundError
from src.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/visuals", tags=["export"])


@router.get("/{visual_id}/export")
async def export_graph(
    visual_id: str,
    format: Literal["json", "graphml", "png"] = "json",
    service: GraphSyncService = Depends(get_sync_service),
) -> Response:
    """Export the live graph of a visual that has an open session."""
    try:
        snapshot = service.get_session(visual_id).live
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"No session for visual {visual_id}")

    filename = f"graph_{visual_id}"
    if format == "json":
        content = json.dumps(snapshot.model_dump(mode="json", by_alias=True), indent=2)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": f"attachment; filename={filename}.json"},
        )

    if format == "png":
        try:
            image = render_graph_image(snapshot)
        except Exception as exc:
            logger.error("graph_render_failed", visual_id=visual_id, error=str(exc))
            raise HTTPException(status_code=500, detail="Graph rendering failed")
        return Response(content=image, media_type="image/png")

    return Response(
        content=to_graphml(snapshot),
        media_type="application/xml",
        headers={"Content-Disposition": f"attachment; filename={filename}.graphml"},
    )


def to_graphml(graph: GraphSnapshot) -> str:
    """Convert a snapshot to GraphML, keeping positions and percent change."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
        '  <key id="label" for="node" attr.name="label" attr.type="string"/>',
        '  <key id="x" for="node" attr.name="x" attr.type="double"/>',
        '  <key id="y" for="node" attr.name="y" attr.type="double"/>',
        '  <key id="pct" for="edge" attr.name="percentChange" attr.type="double"/>',
        '  <graph id="G" edgedefault="directed">',
    ]

    for node in graph.nodes:
        lines.append(f'    <node id="{_xml_escape(node.id)}">')
        lines.append(f'      <data key="label">{_xml_escape(node.label)}</data>')
        lines.append(f'      <data key="x">{node.position.x}</data>')
        lines.append(f'      <data key="y">{node.position.y}</data>')
        lines.append("    </node>")

    for edge in graph.edges:
        lines.append(
            f'    <edge id="{_xml_escape(edge.id)}" source="{_xml_escape(edge.source)}" '
            f'target="{_xml_escape(edge.target)}">'
        )
        lines.append(f'      <data key="pct">{edge.percent_change}</data>')
        lines.append("    </edge>")

    lines.append("  </graph>")
    lines.append("</graphml>")
    return "\n".join(lines)


def _xml_escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")
