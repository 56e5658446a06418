from app.graph.graph_schema import Edge, Node, NodeData, NodeType, Position
from app.validation import validate_graph


def _codes(result):
    return sorted(i.code for i in result.issues)


def test_synthesized_graph_is_valid(full_graph):
    result = validate_graph(full_graph)

    assert result.is_valid
    assert result.stats["total_nodes"] == 15


def test_notification_and_ci_nodes_are_reported_orphaned(minimal_graph):
    orphaned = {i.node_id for i in validate_graph(minimal_graph).issues if i.code == "ORPHANED_NODE"}

    assert orphaned == {"notification-service-1", "ci-cd-1"}


def test_structural_errors(minimal_graph):
    minimal_graph.nodes.append(minimal_graph.nodes[0])
    minimal_graph.edges.extend([
        Edge(id="e-dangling", source="ghost", target="cdn-1"),
        Edge(id="e-loop", source="cdn-1", target="cdn-1"),
        Edge(id="e-parallel", source="frontend-1", target="cdn-1"),
        Edge(id="e-parallel", source="api-users", target="logging-1"),
    ])

    result = validate_graph(minimal_graph)

    assert not result.is_valid
    assert _codes(result) == [
        "DUPLICATE_EDGE_ID",
        "DUPLICATE_NODE_ID",
        "MISSING_SOURCE_NODE",
        "ORPHANED_NODE",
        "ORPHANED_NODE",
        "PARALLEL_EDGE",
        "PARALLEL_EDGE",
        "SELF_LOOP",
    ]


def test_groups_are_not_components(minimal_graph):
    minimal_graph.nodes.append(
        Node(id="grp", type=NodeType.GROUP, position=Position(), data=NodeData(name=""))
    )

    result = validate_graph(minimal_graph)

    assert result.stats["group_nodes"] == 1
    assert not any(i.node_id == "grp" for i in result.issues)
