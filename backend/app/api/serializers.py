from typing import Any, Tuple

from app import config
from app.graph.graph_schema import (
    Edge,
    Graph,
    GraphMetadata,
    Node,
    NodeData,
    NodeType,
    Position,
    utc_now_iso,
)
from app.validation.graph_repair import RepairResult, repair_snapshot


PRIMITIVE_TYPES = (str, int, float, bool, type(None))


def serialize_value(obj: Any):
    """
    Safely serialize open metadata values into JSON-compatible structures.
    Deterministic.
    Callables (UI callbacks) are dropped, never serialized.
    """

    if isinstance(obj, PRIMITIVE_TYPES):
        return obj

    if isinstance(obj, (list, tuple)):
        return [serialize_value(item) for item in obj if not callable(item)]

    if isinstance(obj, dict):
        return {
            str(k): serialize_value(v)
            for k, v in obj.items()
            if not callable(v)
        }

    if hasattr(obj, "__dict__") and not callable(obj):
        return {
            key: serialize_value(value)
            for key, value in obj.__dict__.items()
            if not key.startswith("_") and not callable(value)
        }

    return str(obj)


# -------------------------
# Graph -> snapshot
# -------------------------

def serialize_node(node: Node) -> dict:
    data = {
        "name": node.data.name,
        "description": node.data.description,
        "color": node.data.color,
        "metadata": serialize_value(node.data.metadata),
    }
    if node.data.ai_explanation is not None:
        data["aiExplanation"] = serialize_value(node.data.ai_explanation)
    return {
        "id": node.id,
        "type": node.type.value,
        "position": {"x": node.position.x, "y": node.position.y},
        "data": data,
    }


def serialize_edge(edge: Edge) -> dict:
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "type": edge.type,
        "label": edge.label,
        "data": serialize_value(edge.data),
    }


def serialize_graph(graph: Graph) -> dict:
    """Persistence snapshot: plain JSON types only, camelCase keys, ISO dates."""
    metadata = {
        "createdAt": graph.metadata.created_at,
        "updatedAt": graph.metadata.updated_at,
        "version": graph.metadata.version,
        "tags": list(graph.metadata.tags),
    }
    if graph.metadata.project_id is not None:
        metadata["projectId"] = graph.metadata.project_id

    return {
        "id": graph.id,
        "name": graph.name,
        "description": graph.description,
        "nodes": [serialize_node(n) for n in graph.nodes],
        "edges": [serialize_edge(e) for e in graph.edges],
        "metadata": metadata,
    }


def export_snapshot(graph: Graph) -> dict:
    """Reduced shape handed to the image export path."""
    return {
        "id": graph.id,
        "name": graph.name,
        "nodes": [
            {k: v for k, v in serialize_node(n).items() if k in ("id", "type", "position", "data")}
            for n in graph.nodes
        ],
        "edges": [
            {"id": e.id, "source": e.source, "target": e.target, "label": e.label}
            for e in graph.edges
        ],
    }


# -------------------------
# snapshot -> Graph
# -------------------------

def _float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _deserialize_node(raw: dict) -> Node:
    position = raw.get("position") or {}
    data = raw.get("data") or {}
    metadata = data.get("metadata")
    return Node(
        id=raw["id"],
        type=NodeType(raw["type"]),
        position=Position(x=_float(position.get("x")), y=_float(position.get("y"))),
        data=NodeData(
            name=data.get("name") or "",
            description=data.get("description"),
            color=data.get("color"),
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
            ai_explanation=data.get("aiExplanation"),
        ),
    )


def _deserialize_edge(raw: dict) -> Edge:
    data = raw.get("data")
    return Edge(
        id=raw["id"],
        source=raw["source"],
        target=raw["target"],
        label=raw.get("label") or "",
        type=raw.get("type") or "smoothstep",
        data=dict(data) if isinstance(data, dict) else {},
    )


def load_graph(raw: Any) -> Tuple[Graph, RepairResult]:
    """
    Turn an untrusted stored snapshot into a valid Graph.

    This is the one place null nodes, unknown types, duplicate ids,
    dangling and parallel edges are filtered; the core never sees them.
    """
    snapshot, repair = repair_snapshot(raw)

    now = utc_now_iso()
    raw_metadata = snapshot.get("metadata") or {}
    tags = raw_metadata.get("tags")
    metadata = GraphMetadata(
        created_at=raw_metadata.get("createdAt") or now,
        updated_at=raw_metadata.get("updatedAt") or now,
        version=raw_metadata.get("version") or config.GRAPH_VERSION,
        tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        project_id=raw_metadata.get("projectId"),
    )

    graph = Graph(
        id=snapshot["id"],
        name=snapshot.get("name") or "Untitled Architecture",
        description=snapshot.get("description"),
        nodes=[_deserialize_node(n) for n in snapshot["nodes"]],
        edges=[_deserialize_edge(e) for e in snapshot["edges"]],
        metadata=metadata,
    )
    return graph, repair
