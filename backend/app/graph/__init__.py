# Architecture graph module
# Data model, archetype catalog, layered layout and starter graph synthesis

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
from app.graph.layout import LayoutSettings, apply_layered_layout, layered_position
from app.graph.synthesizer import synthesize_architecture

__all__ = [
    "Edge",
    "Graph",
    "GraphMetadata",
    "Node",
    "NodeData",
    "NodeType",
    "Position",
    "utc_now_iso",
    "LayoutSettings",
    "apply_layered_layout",
    "layered_position",
    "synthesize_architecture",
]
