# backend/app/editor/registry.py
"""
Editor Registry - one live EditorSession per graph id
"""

import asyncio
from typing import Dict, Optional

import structlog

from app.editor.mutations import GraphEditor
from app.editor.session import EditorSession
from app.graph.graph_schema import Graph

logger = structlog.get_logger(__name__)


class EditorRegistry:
    """
    Keeps the editable sessions the HTTP layer works on.

    Sessions are created on synthesis or lazily from the repository the
    first time a stored graph is requested.
    """

    def __init__(self, repository=None):
        self.repository = repository
        self.sessions: Dict[str, EditorSession] = {}

    def open(self, graph: Graph, project_id: Optional[str] = None, readonly: bool = False) -> EditorSession:
        session = EditorSession(
            GraphEditor(graph, readonly=readonly),
            repository=self.repository,
            project_id=project_id or graph.metadata.project_id,
        )
        self.sessions[graph.id] = session
        logger.debug("session_opened", graph_id=graph.id, readonly=readonly)
        return session

    def get(self, graph_id: str) -> Optional[EditorSession]:
        session = self.sessions.get(graph_id)
        if session is not None:
            return session

        if self.repository is None:
            return None
        graph = self.repository.load(graph_id)
        if graph is None:
            return None
        return self.open(graph)

    async def get_async(self, graph_id: str) -> Optional[EditorSession]:
        """Like get(), with the repository read kept off the event loop."""
        session = self.sessions.get(graph_id)
        if session is not None or self.repository is None:
            return session

        graph = await asyncio.to_thread(self.repository.load, graph_id)
        if graph is None:
            return None
        # Another request may have opened it while the read was running
        return self.sessions.get(graph_id) or self.open(graph)

    def close(self, graph_id: str) -> bool:
        return self.sessions.pop(graph_id, None) is not None

    def clear(self) -> None:
        self.sessions.clear()


_global_registry: Optional[EditorRegistry] = None


def get_editor_registry() -> EditorRegistry:
    """Get or create the global editor registry"""
    global _global_registry
    if _global_registry is None:
        from app.db.repository import ArchitectureRepository
        from app.db.session import SessionLocal

        _global_registry = EditorRegistry(ArchitectureRepository(SessionLocal))
    return _global_registry
