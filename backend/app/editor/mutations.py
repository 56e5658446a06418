# backend/app/editor/mutations.py
"""
Graph Editor - the single authority for structural changes to a live graph

Every user-initiated edit (add / edit / duplicate / delete node, drag commit,
connect, relabel / delete edge) goes through GraphEditor so the invariants
hold at one choke point:
- every edge endpoint resolves to a node in the graph
- at most one edge per unordered {source, target} pair
- node and edge ids are unique and never reused

Requests that would break an invariant (unknown ids, dangling endpoints)
are absorbed: the call returns None / False and the graph stays Clean.
"""

import copy
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import structlog

from app.graph.graph_schema import (
    Edge,
    Graph,
    Node,
    NodeData,
    NodeType,
    Position,
    utc_now_iso,
)
from app.graph.node_style import default_metadata, node_type_color

logger = structlog.get_logger(__name__)

DUPLICATE_OFFSET = 50.0
DEFAULT_EDGE_LABEL = "Connection"
DEFAULT_EDGE_DATA = {"protocol": "HTTPS", "security": "JWT"}


@dataclass
class Viewport:
    """Pan/zoom of the rendering surface, used to map screen points to graph space"""
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def screen_to_graph(self, point: Tuple[float, float]) -> Position:
        zoom = self.zoom or 1.0
        return Position(x=(point[0] - self.x) / zoom, y=(point[1] - self.y) / zoom)


def new_node_id() -> str:
    return f"node-{uuid.uuid4().hex}"


def new_edge_id() -> str:
    return f"edge-{uuid.uuid4().hex}"


class GraphEditor:
    """
    Applies user edits to one graph instance and tracks Clean / Dirty.

    Example usage:
        editor = GraphEditor(graph)
        node = editor.add_node(NodeType.CACHE, screen_point=(300, 300))
        editor.connect("api-users", node.id)
        editor.mark_saved()
    """

    def __init__(self, graph: Graph, readonly: bool = False):
        self.graph = graph
        self.readonly = readonly
        self.dirty = False
        # bumped by every structural change
        self.revision = 0

    # ---------- state ----------

    def _touch(self) -> None:
        self.graph.metadata.updated_at = utc_now_iso()
        self.dirty = True
        self.revision += 1

    def begin_save(self) -> int:
        """Stamp updatedAt for the snapshot about to be written; returns the revision it holds."""
        self.graph.metadata.updated_at = utc_now_iso()
        return self.revision

    def mark_saved(self, revision: Optional[int] = None) -> bool:
        """
        Dirty -> Clean after a successful save.

        When the saved snapshot was taken at `revision` and the graph has
        changed since, it stays Dirty and False is returned.
        """
        if revision is not None and revision != self.revision:
            return False
        self.dirty = False
        return True

    def _fresh_id(self, factory) -> str:
        taken = self.graph.node_ids() | {e.id for e in self.graph.edges}
        candidate = factory()
        while candidate in taken:
            candidate = factory()
        return candidate

    # ---------- nodes ----------

    def add_node(
        self,
        node_type: Any,
        name: Optional[str] = None,
        description: Optional[str] = None,
        screen_point: Optional[Tuple[float, float]] = None,
        viewport: Optional[Viewport] = None,
    ) -> Optional[Node]:
        if self.readonly:
            return None

        resolved = NodeType.parse(node_type)
        if resolved is None:
            logger.debug("add_node_ignored", reason="unknown_type", node_type=node_type)
            return None

        point = screen_point if screen_point is not None else (300.0, 300.0)
        position = (viewport or Viewport()).screen_to_graph(point)
        type_name = resolved.value

        node = Node(
            id=self._fresh_id(new_node_id),
            type=resolved,
            position=position,
            data=NodeData(
                name=name or f"New {type_name}",
                description=description or f"A new {type_name} component",
                color=node_type_color(resolved),
                metadata=default_metadata(resolved),
            ),
        )
        self.graph.nodes.append(node)
        self._touch()
        logger.debug("node_added", node_id=node.id, node_type=type_name)
        return node

    def edit_node(self, node_id: str, name: str, description: Optional[str]) -> bool:
        if self.readonly:
            return False
        node = self.graph.get_node(node_id)
        if node is None:
            logger.debug("edit_node_ignored", node_id=node_id)
            return False

        node.data.name = name
        node.data.description = description
        self._touch()
        return True

    def duplicate_node(self, node_id: str) -> Optional[Node]:
        if self.readonly:
            return None
        original = self.graph.get_node(node_id)
        if original is None:
            logger.debug("duplicate_node_ignored", node_id=node_id)
            return None

        data = copy.deepcopy(original.data)
        data.name = f"{original.data.name} Copy"
        clone = Node(
            id=self._fresh_id(new_node_id),
            type=original.type,
            position=Position(
                x=original.position.x + DUPLICATE_OFFSET,
                y=original.position.y + DUPLICATE_OFFSET,
            ),
            data=data,
        )
        self.graph.nodes.append(clone)
        self._touch()
        logger.debug("node_duplicated", source_id=node_id, node_id=clone.id)
        return clone

    def delete_node(self, node_id: str) -> bool:
        """Remove a node and every edge touching it (the only cascade)."""
        if self.readonly:
            return False
        if self.graph.get_node(node_id) is None:
            logger.debug("delete_node_ignored", node_id=node_id)
            return False

        before = len(self.graph.edges)
        self.graph.nodes = [n for n in self.graph.nodes if n.id != node_id]
        self.graph.edges = [
            e for e in self.graph.edges
            if e.source != node_id and e.target != node_id
        ]
        self._touch()
        logger.debug(
            "node_deleted",
            node_id=node_id,
            edges_removed=before - len(self.graph.edges),
        )
        return True

    def move_node(self, node_id: str, position: Position) -> bool:
        """Commit a node position; called once per drag, at drag end."""
        if self.readonly:
            return False
        node = self.graph.get_node(node_id)
        if node is None:
            return False

        node.position = Position(x=float(position.x), y=float(position.y))
        self._touch()
        return True

    # ---------- edges ----------

    def connect(
        self,
        source: str,
        target: str,
        label: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[Edge]:
        """
        Create the edge source -> target, replacing any edge that already
        joins the same pair in either direction. The replacement gets a
        fresh id and is appended at the end of the edge list.
        """
        if self.readonly:
            return None

        node_ids = self.graph.node_ids()
        if source not in node_ids or target not in node_ids:
            logger.debug("connect_ignored", reason="unknown_endpoint", source=source, target=target)
            return None
        if source == target:
            logger.debug("connect_ignored", reason="self_loop", source=source)
            return None

        pair = frozenset((source, target))
        replaced = [e.id for e in self.graph.edges if e.pair() == pair]
        if replaced:
            self.graph.edges = [e for e in self.graph.edges if e.pair() != pair]

        edge = Edge(
            id=self._fresh_id(new_edge_id),
            source=source,
            target=target,
            label=label or DEFAULT_EDGE_LABEL,
            data=dict(data) if data is not None else dict(DEFAULT_EDGE_DATA),
        )
        self.graph.edges.append(edge)
        self._touch()
        logger.debug(
            "edge_replaced" if replaced else "edge_added",
            edge_id=edge.id,
            replaced=replaced,
        )
        return edge

    def relabel_edge(self, edge_id: str, label: str) -> bool:
        if self.readonly:
            return False
        edge = self.graph.get_edge(edge_id)
        if edge is None:
            logger.debug("relabel_edge_ignored", edge_id=edge_id)
            return False

        edge.label = label
        self._touch()
        return True

    def delete_edge(self, edge_id: str) -> bool:
        if self.readonly:
            return False
        if self.graph.get_edge(edge_id) is None:
            logger.debug("delete_edge_ignored", edge_id=edge_id)
            return False

        self.graph.edges = [e for e in self.graph.edges if e.id != edge_id]
        self._touch()
        return True
