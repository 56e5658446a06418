# backend/app/editor/session.py
"""
Editor Session - one editable graph plus its save lifecycle

The session is the only asynchronous piece of the editor. A save shows a
transient SAVING status, runs the blocking repository write off the event
loop, then shows SAVED until the indicator drops back to IDLE.

A failed save is logged and reported as ERROR; the in-memory graph is
kept as-is along with its Dirty / Clean state. Edits made while a write
is in flight are not in the stored snapshot, so they keep the graph Dirty.
"""

import asyncio
from enum import Enum
from typing import Optional

import structlog

from app import config
from app.api.serializers import serialize_graph
from app.editor.mutations import GraphEditor
from app.graph.graph_schema import Graph
from app.render.flow_adapter import FlowCanvas

logger = structlog.get_logger(__name__)


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class EditorSession:

    def __init__(
        self,
        editor: GraphEditor,
        repository=None,
        project_id: Optional[str] = None,
        saved_indicator_seconds: Optional[float] = None,
    ):
        self.editor = editor
        self.canvas = FlowCanvas(editor)
        self.repository = repository
        self.project_id = project_id
        self.saved_indicator_seconds = (
            config.SAVED_INDICATOR_SECONDS
            if saved_indicator_seconds is None
            else saved_indicator_seconds
        )
        self.status = SaveStatus.IDLE
        self.last_error: Optional[str] = None

    @property
    def graph(self) -> Graph:
        return self.editor.graph

    @property
    def dirty(self) -> bool:
        return self.editor.dirty

    def _reset_indicator(self) -> None:
        # A newer save may already own the indicator
        if self.status == SaveStatus.SAVED:
            self.status = SaveStatus.IDLE

    async def save(self) -> bool:
        """
        Persist the current graph.

        Returns True when the repository accepted the snapshot. A save
        requested while another is in flight is ignored and returns False.
        """
        if self.status == SaveStatus.SAVING:
            logger.debug("save_ignored", reason="in_flight", graph_id=self.graph.id)
            return False

        if self.repository is None:
            self.status = SaveStatus.ERROR
            self.last_error = "No repository configured"
            logger.warning("save_failed", graph_id=self.graph.id, error=self.last_error)
            return False

        self.status = SaveStatus.SAVING
        self.last_error = None

        # Snapshot on the loop; only the write leaves it
        revision = self.editor.begin_save()
        snapshot = serialize_graph(self.graph)

        try:
            await asyncio.to_thread(self.repository.save_snapshot, snapshot, self.project_id)
        except Exception as e:
            self.status = SaveStatus.ERROR
            self.last_error = str(e)
            logger.error("save_failed", graph_id=self.graph.id, error=str(e), exc_info=True)
            return False

        clean = self.editor.mark_saved(revision)
        self.status = SaveStatus.SAVED
        logger.info(
            "graph_saved",
            graph_id=self.graph.id,
            nodes=len(snapshot["nodes"]),
            edited_during_save=not clean,
        )

        asyncio.get_running_loop().call_later(
            self.saved_indicator_seconds,
            self._reset_indicator,
        )
        return True

    def to_dict(self) -> dict:
        return {
            "graph_id": self.graph.id,
            "dirty": self.dirty,
            "readonly": self.editor.readonly,
            "save_status": self.status.value,
            "last_error": self.last_error,
        }
