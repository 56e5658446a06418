# Graph editor module
# Mutation engine, save session and starter template injection

from app.editor.mutations import GraphEditor, Viewport
from app.editor.registry import EditorRegistry, get_editor_registry
from app.editor.session import EditorSession, SaveStatus
from app.editor.template_injector import InjectionResult, TemplateInjector, apply_template

__all__ = [
    "GraphEditor",
    "Viewport",
    "EditorRegistry",
    "get_editor_registry",
    "EditorSession",
    "SaveStatus",
    "InjectionResult",
    "TemplateInjector",
    "apply_template",
]
