from dataclasses import dataclass
from typing import Sequence

from app import config
from app.graph.graph_schema import Graph, Position


@dataclass(frozen=True)
class LayoutSettings:
    start_x: float = config.LAYOUT_START_X
    start_y: float = config.LAYOUT_START_Y
    horizontal_spacing: float = config.LAYOUT_HORIZONTAL_SPACING
    vertical_spacing: float = config.LAYOUT_VERTICAL_SPACING


DEFAULT_LAYOUT = LayoutSettings()


def layered_position(
    layer: int,
    index: int,
    layer_size: int,
    settings: LayoutSettings = DEFAULT_LAYOUT,
) -> Position:
    """
    Position of the index-th node of a layer holding layer_size nodes.

    Layers sit at fixed horizontal intervals. Inside a layer the nodes are
    spread by vertical_spacing and centred as a group on start_y, so a layer
    of n nodes spans (n - 1) * vertical_spacing symmetrically around start_y.
    No collision avoidance and no crossing minimisation.
    """
    size = max(layer_size, 1)
    x = settings.start_x + layer * settings.horizontal_spacing
    y = settings.start_y + (index - (size - 1) / 2) * settings.vertical_spacing
    return Position(x=x, y=y)


def apply_layered_layout(
    graph: Graph,
    layers: Sequence[Sequence[str]],
    settings: LayoutSettings = DEFAULT_LAYOUT,
) -> Graph:
    """Position every node named in an explicit layer -> ordered ids assignment."""
    for layer_index, node_ids in enumerate(layers):
        for index, node_id in enumerate(node_ids):
            node = graph.get_node(node_id)
            if node is None:
                continue
            node.position = layered_position(layer_index, index, len(node_ids), settings)
    return graph
