# backend/app/render/flow_adapter.py
"""
Flow Canvas Adapter

Projects the core graph onto the node/edge shapes an interactive canvas
renders, and translates the canvas' change events back into GraphEditor
calls.

Drag moves are held in a transient position map while `dragging` is true
and only reach the graph when the drag ends. Edge visibility is purely a
rendering filter; hiding edges never touches graph.edges.
"""

from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

import structlog

from app.graph.graph_schema import Edge, Node, Position
from app.graph.node_style import node_type_color, node_type_icon

if TYPE_CHECKING:
    from app.editor.mutations import GraphEditor

logger = structlog.get_logger(__name__)

EDGE_COLOR = "#107a4d"
EDGE_STYLE = {"stroke": EDGE_COLOR, "strokeWidth": 2}
EDGE_MARKER = {"type": "arrowclosed", "width": 20, "height": 20, "color": EDGE_COLOR}
NODE_Z_INDEX = 0
GROUP_Z_INDEX = -1


# -------------------------
# Projections
# -------------------------

def to_flow_node(node: Node, position: Optional[Position] = None, readonly: bool = False) -> Dict[str, Any]:
    pos = position or node.position
    data = {
        "name": node.data.name,
        "description": node.data.description,
        "color": node.data.color or node_type_color(node.type),
        "icon": node_type_icon(node.type),
        "metadata": dict(node.data.metadata),
    }
    if node.data.ai_explanation is not None:
        data["aiExplanation"] = node.data.ai_explanation

    flow_node = {
        "id": node.id,
        "type": node.type.value,
        "position": {"x": pos.x, "y": pos.y},
        "data": data,
        "draggable": not readonly,
        "selectable": True,
        "zIndex": NODE_Z_INDEX,
    }
    if node.is_group:
        flow_node["draggable"] = False
        flow_node["selectable"] = False
        flow_node["zIndex"] = GROUP_Z_INDEX
    return flow_node


def to_flow_edge(edge: Edge) -> Dict[str, Any]:
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "type": edge.type,
        "label": edge.label,
        "data": dict(edge.data),
        "animated": True,
        "style": dict(EDGE_STYLE),
        "markerEnd": dict(EDGE_MARKER),
    }


def _read_position(raw: Any) -> Optional[Position]:
    if not isinstance(raw, dict):
        return None
    try:
        return Position(x=float(raw["x"]), y=float(raw["y"]))
    except (KeyError, TypeError, ValueError):
        return None


# -------------------------
# Canvas
# -------------------------

class FlowCanvas:
    """
    Rendering-side view of one editor.

    Example usage:
        canvas = FlowCanvas(editor)
        canvas.apply_node_changes([
            {"type": "position", "id": "cache-1", "position": {"x": 10, "y": 20}, "dragging": True},
            {"type": "position", "id": "cache-1", "dragging": False},
        ])
    """

    def __init__(self, editor: "GraphEditor", show_edges: bool = True):
        self.editor = editor
        self.show_edges = show_edges
        self._transient: Dict[str, Position] = {}

    def toggle_edges(self) -> bool:
        self.show_edges = not self.show_edges
        return self.show_edges

    # ---------- projections ----------

    def nodes(self) -> List[Dict[str, Any]]:
        return [
            to_flow_node(n, self._transient.get(n.id), readonly=self.editor.readonly)
            for n in self.editor.graph.nodes
        ]

    def edges(self) -> List[Dict[str, Any]]:
        if not self.show_edges:
            return []
        return [to_flow_edge(e) for e in self.editor.graph.edges]

    def stats(self) -> Dict[str, int]:
        """Component / connection counts; group backdrops never count."""
        graph = self.editor.graph
        groups = {n.id for n in graph.nodes if n.is_group}
        connections = 0
        if self.show_edges:
            connections = sum(
                1 for e in graph.edges
                if e.source not in groups and e.target not in groups
            )
        return {
            "components": len(graph.nodes) - len(groups),
            "connections": connections,
        }

    # ---------- change events ----------

    def apply_node_changes(self, changes: Iterable[Dict[str, Any]]) -> int:
        """Apply canvas node changes; returns how many reached the graph."""
        committed = 0
        for change in changes:
            kind = change.get("type")
            node_id = change.get("id")

            if kind == "position":
                if self._apply_position(node_id, change):
                    committed += 1
            elif kind == "remove":
                self._transient.pop(node_id, None)
                if self.editor.delete_node(node_id):
                    committed += 1
            else:
                # select / dimensions and friends are view-only
                continue
        return committed

    def _apply_position(self, node_id: str, change: Dict[str, Any]) -> bool:
        node = self.editor.graph.get_node(node_id)
        if node is None or node.is_group or self.editor.readonly:
            return False

        position = _read_position(change.get("position"))
        if change.get("dragging"):
            if position is not None:
                self._transient[node_id] = position
            return False

        final = position or self._transient.get(node_id)
        self._transient.pop(node_id, None)
        if final is None:
            return False
        committed = self.editor.move_node(node_id, final)
        if committed:
            logger.debug("drag_committed", node_id=node_id, x=final.x, y=final.y)
        return committed

    def apply_edge_changes(self, changes: Iterable[Dict[str, Any]]) -> int:
        removed = 0
        for change in changes:
            if change.get("type") == "remove" and self.editor.delete_edge(change.get("id")):
                removed += 1
        return removed

    def on_connect(self, connection: Dict[str, Any]) -> Optional[Edge]:
        return self.editor.connect(
            connection.get("source"),
            connection.get("target"),
            label=connection.get("label"),
            data=connection.get("data"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": self.nodes(),
            "edges": self.edges(),
            "show_edges": self.show_edges,
            "stats": self.stats(),
        }
