import asyncio
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.api.serializers import export_snapshot, serialize_edge, serialize_graph, serialize_node
from app.editor.mutations import Viewport
from app.editor.registry import EditorRegistry, get_editor_registry
from app.editor.session import EditorSession
from app.editor.template_injector import apply_template
from app.graph.synthesizer import synthesize_architecture
from app.graph.templates import ARCHITECTURE_TEMPLATES
from app.schemas import (
    AddNodeRequest,
    AssociateProjectRequest,
    CleanupRequest,
    ConnectRequest,
    EditNodeRequest,
    GenerateRequest,
    NodeChangesRequest,
    RelabelEdgeRequest,
)
from app.validation.graph_validator import validate_graph

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _session_or_404(graph_id: str, registry: EditorRegistry) -> EditorSession:
    session = await registry.get_async(graph_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Architecture '{graph_id}' not found")
    return session


def _noop(session: EditorSession, reason: str) -> dict:
    return {"status": "noop", "reason": reason, "session": session.to_dict()}


# -------------------------
# Synthesis & read
# -------------------------

@router.post("/architectures/generate")
async def generate_architecture(
    request: GenerateRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    graph = synthesize_architecture(
        request.schema_input,
        request.endpoint_input,
        project_name=request.project_name,
    )
    if request.project_id:
        graph.metadata.project_id = request.project_id

    session = registry.open(graph, project_id=request.project_id, readonly=request.readonly)
    return {
        "status": "success",
        "architecture": serialize_graph(graph),
        "session": session.to_dict(),
    }


@router.get("/architectures/{graph_id}")
async def get_architecture(graph_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = await _session_or_404(graph_id, registry)
    return {
        "status": "success",
        "architecture": serialize_graph(session.graph),
        "session": session.to_dict(),
    }


@router.get("/architectures/{graph_id}/canvas")
async def get_canvas(
    graph_id: str,
    show_edges: Optional[bool] = None,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = await _session_or_404(graph_id, registry)
    if show_edges is not None:
        session.canvas.show_edges = show_edges
    return {"status": "success", "canvas": session.canvas.to_dict()}


# -------------------------
# Node mutations
# -------------------------

@router.post("/architectures/{graph_id}/nodes")
async def add_node(
    graph_id: str,
    request: AddNodeRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = await _session_or_404(graph_id, registry)
    point = (request.screen_point.x, request.screen_point.y) if request.screen_point else None
    viewport = Viewport(**request.viewport.model_dump()) if request.viewport else None

    node = session.editor.add_node(
        request.type,
        name=request.name,
        description=request.description,
        screen_point=point,
        viewport=viewport,
    )
    if node is None:
        return _noop(session, f"Cannot add node of type '{request.type}'")
    return {"status": "success", "node": serialize_node(node), "session": session.to_dict()}


@router.patch("/architectures/{graph_id}/nodes/{node_id}")
async def edit_node(
    graph_id: str,
    node_id: str,
    request: EditNodeRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = await _session_or_404(graph_id, registry)
    if not session.editor.edit_node(node_id, request.name, request.description):
        return _noop(session, f"Node '{node_id}' not editable")
    return {
        "status": "success",
        "node": serialize_node(session.graph.get_node(node_id)),
        "session": session.to_dict(),
    }


@router.post("/architectures/{graph_id}/nodes/{node_id}/duplicate")
async def duplicate_node(graph_id: str, node_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = await _session_or_404(graph_id, registry)
    clone = session.editor.duplicate_node(node_id)
    if clone is None:
        return _noop(session, f"Node '{node_id}' not found")
    return {"status": "success", "node": serialize_node(clone), "session": session.to_dict()}


@router.delete("/architectures/{graph_id}/nodes/{node_id}")
async def delete_node(graph_id: str, node_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = await _session_or_404(graph_id, registry)
    if not session.editor.delete_node(node_id):
        return _noop(session, f"Node '{node_id}' not found")
    return {"status": "success", "session": session.to_dict()}


@router.post("/architectures/{graph_id}/node-changes")
async def apply_node_changes(
    graph_id: str,
    request: NodeChangesRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = await _session_or_404(graph_id, registry)
    committed = session.canvas.apply_node_changes(request.changes)
    return {
        "status": "success" if committed else "noop",
        "committed": committed,
        "canvas": session.canvas.to_dict(),
        "session": session.to_dict(),
    }


# -------------------------
# Edge mutations
# -------------------------

@router.post("/architectures/{graph_id}/connections")
async def connect(
    graph_id: str,
    request: ConnectRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = await _session_or_404(graph_id, registry)
    edge = session.editor.connect(
        request.source,
        request.target,
        label=request.label,
        data=request.data,
    )
    if edge is None:
        return _noop(session, f"Cannot connect '{request.source}' to '{request.target}'")
    return {"status": "success", "edge": serialize_edge(edge), "session": session.to_dict()}


@router.patch("/architectures/{graph_id}/edges/{edge_id}")
async def relabel_edge(
    graph_id: str,
    edge_id: str,
    request: RelabelEdgeRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = await _session_or_404(graph_id, registry)
    if not session.editor.relabel_edge(edge_id, request.label):
        return _noop(session, f"Edge '{edge_id}' not found")
    return {
        "status": "success",
        "edge": serialize_edge(session.graph.get_edge(edge_id)),
        "session": session.to_dict(),
    }


@router.delete("/architectures/{graph_id}/edges/{edge_id}")
async def delete_edge(graph_id: str, edge_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = await _session_or_404(graph_id, registry)
    if not session.editor.delete_edge(edge_id):
        return _noop(session, f"Edge '{edge_id}' not found")
    return {"status": "success", "session": session.to_dict()}


# -------------------------
# Templates
# -------------------------

@router.get("/templates")
async def list_templates():
    return {
        "templates": [
            {
                "id": t.id,
                "name": t.name,
                "description": t.description,
                "icon": t.icon,
                "category": t.category,
                "components": len(t.components),
            }
            for t in ARCHITECTURE_TEMPLATES.values()
        ]
    }


@router.post("/architectures/{graph_id}/templates/{template_id}")
async def inject_template(graph_id: str, template_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = await _session_or_404(graph_id, registry)
    result = apply_template(session.editor, template_id)
    if not result.success:
        return _noop(session, f"Template '{template_id}' not applied")
    return {
        "status": "success",
        "nodes_added": result.nodes_added,
        "edges_added": result.edges_added,
        "session": session.to_dict(),
    }


# -------------------------
# Save, export, validate
# -------------------------

@router.post("/architectures/{graph_id}/save")
async def save_architecture(graph_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = await _session_or_404(graph_id, registry)
    saved = await session.save()
    return {
        "status": "success" if saved else "error",
        "session": session.to_dict(),
    }


@router.get("/architectures/{graph_id}/export")
async def export_architecture(graph_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = await _session_or_404(graph_id, registry)
    return {"status": "success", "export": export_snapshot(session.graph)}


@router.get("/architectures/{graph_id}/validate")
async def validate_architecture(graph_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = await _session_or_404(graph_id, registry)
    result = validate_graph(session.graph)
    logger.debug("graph_validated", graph_id=graph_id, summary=result.get_summary())
    return {"status": "success", "validation": result.to_dict()}


# -------------------------
# Stored architectures
# -------------------------

@router.get("/projects/{project_id}/architectures")
async def list_project_architectures(project_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    graphs = []
    if registry.repository is not None:
        graphs = await asyncio.to_thread(registry.repository.list_for_project, project_id)
    return {
        "status": "success",
        "architectures": [
            {
                "id": g.id,
                "name": g.name,
                "nodes": len(g.component_nodes()),
                "edges": len(g.edges),
                "updatedAt": g.metadata.updated_at,
            }
            for g in graphs
        ],
    }


@router.put("/architectures/{graph_id}/project")
async def associate_project(
    graph_id: str,
    request: AssociateProjectRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    stored = registry.repository is not None and await asyncio.to_thread(
        registry.repository.associate_with_project, graph_id, request.project_id
    )
    if not stored:
        raise HTTPException(status_code=404, detail=f"Architecture '{graph_id}' not stored")

    session = registry.sessions.get(graph_id)
    if session is not None:
        session.project_id = request.project_id
        session.graph.metadata.project_id = request.project_id
    return {"status": "success", "project_id": request.project_id}


@router.delete("/architectures/{graph_id}")
async def delete_architecture(graph_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    closed = registry.close(graph_id)
    deleted = False
    if registry.repository is not None:
        deleted = await asyncio.to_thread(registry.repository.delete, graph_id)
    if not (closed or deleted):
        raise HTTPException(status_code=404, detail=f"Architecture '{graph_id}' not found")
    return {"status": "success"}


@router.post("/projects/cleanup")
async def cleanup_orphaned(request: CleanupRequest, registry: EditorRegistry = Depends(get_editor_registry)):
    removed = 0
    if registry.repository is not None:
        removed = await asyncio.to_thread(registry.repository.cleanup_orphaned, request.valid_project_ids)
    return {"status": "success", "removed": removed}
