import random

from app.editor.mutations import DUPLICATE_OFFSET, GraphEditor, Viewport
from app.graph.graph_schema import NodeType, Position


def _assert_invariants(graph):
    node_ids = [n.id for n in graph.nodes]
    edge_ids = [e.id for e in graph.edges]
    assert len(node_ids) == len(set(node_ids))
    assert len(edge_ids) == len(set(edge_ids))
    assert None not in graph.nodes

    ids = set(node_ids)
    pairs = [e.pair() for e in graph.edges]
    assert all(e.source in ids and e.target in ids for e in graph.edges)
    assert len(pairs) == len(set(pairs))


# -------------------------
# Nodes
# -------------------------

def test_add_node_defaults(editor):
    node = editor.add_node("cache")

    assert node.type == NodeType.CACHE
    assert node.data.name == "New cache"
    assert node.data.description == "A new cache component"
    assert node.data.metadata == {"technology": ""}
    assert node.position == Position(x=300, y=300)
    assert editor.dirty


def test_add_node_guesses_technology(editor):
    assert editor.add_node(NodeType.DATABASE).data.metadata["technology"] == "PostgreSQL"
    assert editor.add_node("frontend").data.metadata["technology"] == "React"


def test_add_node_maps_screen_point_through_viewport(editor):
    node = editor.add_node("queue", screen_point=(300, 200), viewport=Viewport(x=100, y=0, zoom=2))

    assert node.position == Position(x=100, y=100)


def test_add_node_unknown_type_is_ignored(editor):
    assert editor.add_node("mainframe") is None
    assert not editor.dirty


def test_edit_node_replaces_name_and_description(editor):
    metadata = dict(editor.graph.get_node("api-users").data.metadata)

    assert editor.edit_node("api-users", "Accounts API", None)

    node = editor.graph.get_node("api-users")
    assert node.data.name == "Accounts API"
    assert node.data.description is None
    assert node.data.metadata == metadata


def test_edit_unknown_node_is_noop(editor):
    before = [n.data.name for n in editor.graph.nodes]

    assert not editor.edit_node("nope", "X", "Y")
    assert [n.data.name for n in editor.graph.nodes] == before
    assert not editor.dirty


def test_duplicate_node(editor):
    original = editor.graph.get_node("database-1")

    clone = editor.duplicate_node("database-1")

    assert clone.id != original.id
    assert clone.data.name == "PostgreSQL Database Copy"
    assert clone.position.x == original.position.x + DUPLICATE_OFFSET
    assert clone.position.y == original.position.y + DUPLICATE_OFFSET
    clone.data.metadata["technology"] = "MySQL"
    assert original.data.metadata["technology"] == "PostgreSQL"


def test_delete_node_cascades(editor):
    touching = [e.id for e in editor.graph.edges if "database-1" in (e.source, e.target)]
    assert touching

    assert editor.delete_node("database-1")

    assert editor.graph.get_node("database-1") is None
    assert not any("database-1" in (e.source, e.target) for e in editor.graph.edges)
    assert not any(editor.graph.get_edge(edge_id) for edge_id in touching)


def test_move_node_commits_position(editor):
    assert editor.move_node("cdn-1", Position(x=7, y=8))
    assert editor.graph.get_node("cdn-1").position == Position(x=7, y=8)


# -------------------------
# Edges
# -------------------------

def test_connect_defaults(editor):
    edge = editor.connect("cdn-1", "database-1")

    assert edge.label == "Connection"
    assert edge.data == {"protocol": "HTTPS", "security": "JWT"}
    assert editor.graph.edges[-1] is edge


def test_connect_replaces_existing_pair_in_either_direction(editor):
    old = next(e for e in editor.graph.edges if e.source == "api-users" and e.target == "database-1")
    count = len(editor.graph.edges)

    edge = editor.connect("database-1", "api-users", label="Read", data={"protocol": "SQL"})

    assert len(editor.graph.edges) == count
    assert editor.graph.get_edge(old.id) is None
    assert edge.id != old.id
    assert (edge.source, edge.target, edge.label) == ("database-1", "api-users", "Read")


def test_connect_twice_keeps_second_label(editor):
    editor.connect("cdn-1", "logging-1", label="first")
    editor.connect("cdn-1", "logging-1", label="second", data={"protocol": "TCP"})

    edges = [e for e in editor.graph.edges if e.pair() == frozenset(("cdn-1", "logging-1"))]
    assert len(edges) == 1
    assert edges[0].label == "second"
    assert edges[0].data == {"protocol": "TCP"}


def test_connect_rejects_unknown_endpoint_and_self_loop(editor):
    before = list(editor.graph.edges)

    assert editor.connect("cdn-1", "ghost") is None
    assert editor.connect("cdn-1", "cdn-1") is None
    assert editor.graph.edges == before
    assert not editor.dirty


def test_relabel_and_delete_edge(editor):
    edge = editor.graph.edges[0]

    assert editor.relabel_edge(edge.id, "Assets")
    assert editor.graph.get_edge(edge.id).label == "Assets"
    assert editor.delete_edge(edge.id)
    assert editor.graph.get_edge(edge.id) is None
    assert not editor.delete_edge(edge.id)


# -------------------------
# State
# -------------------------

def test_mutation_refreshes_updated_at(editor):
    editor.graph.metadata.updated_at = "stale"

    editor.add_node("cdn")

    assert editor.graph.metadata.updated_at != "stale"


def test_mark_saved_clears_dirty(editor):
    editor.add_node("cdn")
    editor.mark_saved()
    assert not editor.dirty


def test_readonly_absorbs_everything(minimal_graph):
    editor = GraphEditor(minimal_graph, readonly=True)
    node_count, edge_count = len(minimal_graph.nodes), len(minimal_graph.edges)

    assert editor.add_node("cache") is None
    assert editor.duplicate_node("cdn-1") is None
    assert not editor.delete_node("cdn-1")
    assert not editor.edit_node("cdn-1", "x", None)
    assert not editor.move_node("cdn-1", Position(x=1, y=1))
    assert editor.connect("cdn-1", "database-1") is None
    assert not editor.delete_edge(minimal_graph.edges[0].id)

    assert (len(minimal_graph.nodes), len(minimal_graph.edges)) == (node_count, edge_count)
    assert not editor.dirty


def test_random_operation_sequences_keep_invariants(full_graph):
    rng = random.Random(1234)
    editor = GraphEditor(full_graph)
    types = [t.value for t in NodeType if t != NodeType.GROUP]

    for _ in range(500):
        node_ids = [n.id for n in editor.graph.nodes] + ["ghost"]
        edge_ids = [e.id for e in editor.graph.edges] + ["ghost-edge"]
        op = rng.choice(["add", "dup", "del", "connect", "connect", "relabel", "del_edge", "move"])

        if op == "add":
            editor.add_node(rng.choice(types))
        elif op == "dup":
            editor.duplicate_node(rng.choice(node_ids))
        elif op == "del":
            editor.delete_node(rng.choice(node_ids))
        elif op == "connect":
            editor.connect(rng.choice(node_ids), rng.choice(node_ids))
        elif op == "relabel":
            editor.relabel_edge(rng.choice(edge_ids), "x")
        elif op == "del_edge":
            editor.delete_edge(rng.choice(edge_ids))
        else:
            editor.move_node(rng.choice(node_ids), Position(x=rng.random(), y=rng.random()))

        _assert_invariants(editor.graph)
