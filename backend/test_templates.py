from app.editor.mutations import GraphEditor
from app.editor.template_injector import apply_template
from app.graph.templates import ARCHITECTURE_TEMPLATES, MICROSERVICES


def test_microservices_on_empty_canvas(minimal_graph):
    minimal_graph.nodes.clear()
    minimal_graph.edges.clear()
    editor = GraphEditor(minimal_graph)

    result = apply_template(editor, "microservices")

    assert result.success
    assert len(result.nodes_added) == len(MICROSERVICES.components)
    assert result.edges_added == len(MICROSERVICES.connections)
    services = [n for n in editor.graph.nodes if n.data.name.endswith("Service")]
    assert {n.position.x for n in services} == {100 + 2 * 400}
    assert sorted(n.position.y for n in services) == [0, 200]
    assert editor.dirty


def test_template_goes_right_of_existing_nodes(editor):
    rightmost = max(n.position.x for n in editor.graph.nodes)

    result = apply_template(editor, "simple-web-app")

    added = [editor.graph.get_node(node_id) for node_id in result.nodes_added]
    assert min(n.position.x for n in added) > rightmost


def test_unknown_template_is_noop(editor):
    count = len(editor.graph.nodes)

    assert not apply_template(editor, "serverless").success
    assert len(editor.graph.nodes) == count
    assert not editor.dirty


def test_readonly_editor_rejects_templates(minimal_graph):
    assert not apply_template(GraphEditor(minimal_graph, readonly=True), "simple-web-app").success


def test_templates_reference_valid_components():
    for template in ARCHITECTURE_TEMPLATES.values():
        size = len(template.components)
        assert all(0 <= a < size and 0 <= b < size for a, b, _ in template.connections)
