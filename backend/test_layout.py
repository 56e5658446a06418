from app.graph.graph_schema import Graph, GraphMetadata, Node, NodeData, NodeType, Position
from app.graph.layout import LayoutSettings, apply_layered_layout, layered_position


def test_single_node_layer_sits_on_origin():
    assert layered_position(0, 0, 1) == Position(x=100, y=100)


def test_layers_step_horizontally():
    assert layered_position(3, 0, 1).x == 100 + 3 * 400


def test_layer_is_centred_on_start_y():
    ys = [layered_position(2, i, 3).y for i in range(3)]
    assert ys == [-100, 100, 300]
    assert ys[0] - 100 == -(ys[-1] - 100)


def test_even_layer_is_symmetric():
    ys = [layered_position(0, i, 4).y for i in range(4)]
    assert sum(y - 100 for y in ys) == 0
    assert ys[1] - ys[0] == 200


def test_layout_is_deterministic():
    assert layered_position(1, 2, 5) == layered_position(1, 2, 5)


def test_custom_settings():
    settings = LayoutSettings(start_x=0, start_y=0, horizontal_spacing=10, vertical_spacing=5)
    assert layered_position(2, 1, 2, settings) == Position(x=20, y=2.5)


def test_apply_layered_layout_skips_unknown_ids():
    graph = Graph(
        id="arch-test",
        name="Test",
        metadata=GraphMetadata(created_at="t", updated_at="t"),
        nodes=[
            Node(id="a", type=NodeType.CDN, position=Position(), data=NodeData(name="A")),
            Node(id="b", type=NodeType.CACHE, position=Position(), data=NodeData(name="B")),
        ],
    )

    apply_layered_layout(graph, [["a"], ["missing", "b"]])

    assert graph.get_node("a").position == Position(x=100, y=100)
    assert graph.get_node("b").position == Position(x=500, y=200)
