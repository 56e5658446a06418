# backend/app/editor/template_injector.py
"""
Template Injector - drops a starter template onto a live graph

Components are added through the GraphEditor (so ids, defaults and the
Dirty flag behave exactly like manual edits) and laid out one layer per
template layer, to the right of whatever the canvas already holds.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List

import structlog

from app.editor.mutations import GraphEditor
from app.graph.layout import layered_position
from app.graph.templates import ArchitectureTemplate, get_template

logger = structlog.get_logger(__name__)


@dataclass
class InjectionResult:
    """Result of template injection"""
    success: bool
    nodes_added: List[str] = field(default_factory=list)
    edges_added: int = 0


class TemplateInjector:

    def inject(self, editor: GraphEditor, template: ArchitectureTemplate) -> InjectionResult:
        if editor.readonly:
            return InjectionResult(success=False)

        result = InjectionResult(success=True)
        layer_offset = self._next_free_layer(editor)

        by_layer: Dict[int, List[int]] = defaultdict(list)
        for index, component in enumerate(template.components):
            by_layer[component.layer].append(index)

        index_to_id: Dict[int, str] = {}
        for layer, indexes in sorted(by_layer.items()):
            for slot, index in enumerate(indexes):
                component = template.components[index]
                node = editor.add_node(
                    component.node_type,
                    name=component.name,
                    description=component.description,
                )
                if node is None:
                    continue
                editor.move_node(
                    node.id,
                    layered_position(layer_offset + layer, slot, len(indexes)),
                )
                index_to_id[index] = node.id
                result.nodes_added.append(node.id)

        for from_index, to_index, label in template.connections:
            source = index_to_id.get(from_index)
            target = index_to_id.get(to_index)
            if source and target and editor.connect(source, target, label=label):
                result.edges_added += 1

        logger.info(
            "template_injected",
            template_id=template.id,
            nodes_added=len(result.nodes_added),
            edges_added=result.edges_added,
        )
        return result

    def _next_free_layer(self, editor: GraphEditor) -> int:
        """First layer index to the right of every existing node."""
        nodes = editor.graph.component_nodes()
        if not nodes:
            return 0
        origin = layered_position(0, 0, 1)
        rightmost = max(n.position.x for n in nodes)
        spacing = layered_position(1, 0, 1).x - origin.x
        if spacing <= 0:
            return 0
        return max(int((rightmost - origin.x) // spacing) + 1, 0)


def apply_template(editor: GraphEditor, template_id: str) -> InjectionResult:
    """Inject a starter template by id; an unknown id is a no-op."""
    template = get_template(template_id)
    if template is None:
        logger.debug("template_ignored", template_id=template_id)
        return InjectionResult(success=False)
    return TemplateInjector().inject(editor, template)
