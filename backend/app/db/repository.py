"""
Architecture Repository - stores graph snapshots as JSON text

Every read goes through the snapshot codec, which repairs what a stored
snapshot may have picked up (null nodes, dangling edges...). Unknown ids
return None rather than raising.
"""

import json
from typing import Iterable, List, Optional

import structlog

from app.api.serializers import load_graph, serialize_graph
from app.db.models import ArchitectureRecord
from app.graph.graph_schema import Graph, utc_now_iso

logger = structlog.get_logger(__name__)


class ArchitectureRepository:

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def save(self, graph: Graph, project_id: Optional[str] = None) -> None:
        """Insert or replace the stored snapshot for graph.id (last write wins)."""
        self.save_snapshot(serialize_graph(graph), project_id)

    def save_snapshot(self, snapshot: dict, project_id: Optional[str] = None) -> None:
        """Store an already serialized graph; safe to call off the event loop."""
        metadata = snapshot.setdefault("metadata", {})
        project_id = project_id or metadata.get("projectId")
        if project_id is not None:
            metadata["projectId"] = project_id

        graph_id = snapshot["id"]
        with self.session_factory() as db:
            record = db.get(ArchitectureRecord, graph_id)
            if record is None:
                record = ArchitectureRecord(id=graph_id)
                db.add(record)
            record.name = snapshot.get("name") or "Untitled Architecture"
            record.project_id = project_id
            record.snapshot = json.dumps(snapshot)
            db.commit()

        logger.info("architecture_stored", graph_id=graph_id, project_id=project_id)

    def _to_graph(self, record: ArchitectureRecord) -> Graph:
        try:
            raw = json.loads(record.snapshot)
        except (TypeError, ValueError):
            logger.warning("snapshot_unreadable", graph_id=record.id)
            raw = {"name": record.name}

        if isinstance(raw, dict) and not raw.get("id"):
            raw["id"] = record.id
        graph, _ = load_graph(raw)
        return graph

    def load(self, graph_id: str) -> Optional[Graph]:
        with self.session_factory() as db:
            record = db.get(ArchitectureRecord, graph_id)
            if record is None:
                return None
            return self._to_graph(record)

    def list_for_project(self, project_id: str) -> List[Graph]:
        with self.session_factory() as db:
            records = (
                db.query(ArchitectureRecord)
                .filter(ArchitectureRecord.project_id == project_id)
                .order_by(ArchitectureRecord.created_at)
                .all()
            )
            return [self._to_graph(r) for r in records]

    def associate_with_project(self, graph_id: str, project_id: str) -> bool:
        with self.session_factory() as db:
            record = db.get(ArchitectureRecord, graph_id)
            if record is None:
                return False

            snapshot = json.loads(record.snapshot)
            metadata = snapshot.setdefault("metadata", {})
            metadata["projectId"] = project_id
            metadata["updatedAt"] = utc_now_iso()
            record.snapshot = json.dumps(snapshot)
            record.project_id = project_id
            db.commit()
        return True

    def delete(self, graph_id: str) -> bool:
        with self.session_factory() as db:
            record = db.get(ArchitectureRecord, graph_id)
            if record is None:
                return False
            db.delete(record)
            db.commit()
        return True

    def cleanup_orphaned(self, valid_project_ids: Iterable[str]) -> int:
        """Delete graphs tied to a project that no longer exists; unassigned graphs stay."""
        valid = set(valid_project_ids)
        with self.session_factory() as db:
            orphans = [
                r for r in db.query(ArchitectureRecord)
                .filter(ArchitectureRecord.project_id.isnot(None))
                .all()
                if r.project_id not in valid
            ]
            for record in orphans:
                db.delete(record)
            db.commit()

        if orphans:
            logger.info("orphaned_architectures_removed", count=len(orphans))
        return len(orphans)
