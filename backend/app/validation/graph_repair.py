"""
Snapshot Repair - rule-based cleanup of stored graph snapshots.

Runs once, where a persisted snapshot is loaded, so the in-memory model
never holds null entries or broken references:
- null / non-object nodes and edges -> dropped
- unknown node types -> node dropped
- duplicate node ids -> first occurrence kept
- edges to missing nodes, self-loops, duplicate edge ids -> dropped
- parallel edges (same unordered pair) -> last occurrence kept
- non-object data / position / metadata -> replaced with empty objects
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import structlog

from app.graph.graph_schema import NodeType

logger = structlog.get_logger(__name__)


@dataclass
class RepairResult:
    """Result of a repair pass"""
    changes_made: List[str] = field(default_factory=list)
    nodes_dropped: int = 0
    edges_dropped: int = 0

    @property
    def repaired(self) -> bool:
        return bool(self.changes_made)

    def to_dict(self) -> dict:
        return {
            "repaired": self.repaired,
            "nodes_dropped": self.nodes_dropped,
            "edges_dropped": self.edges_dropped,
            "changes_made": self.changes_made,
        }


def _normalise_node(raw: Dict[str, Any], result: RepairResult) -> Dict[str, Any]:
    node = dict(raw)
    node_id = node["id"]

    data = node.get("data")
    if data is not None and not isinstance(data, dict):
        result.changes_made.append(f"Replaced non-object data on node '{node_id}'")
        data = None
    data = dict(data or {})
    if data.get("name") is not None and not isinstance(data["name"], str):
        result.changes_made.append(f"Replaced non-string name on node '{node_id}'")
        data["name"] = str(data["name"])
    node["data"] = data

    position = node.get("position")
    if position is not None and not isinstance(position, dict):
        result.changes_made.append(f"Reset non-object position on node '{node_id}'")
        node["position"] = {"x": 0, "y": 0}
    return node


def _normalise_edge(raw: Dict[str, Any], result: RepairResult) -> Dict[str, Any]:
    edge = dict(raw)
    data = edge.get("data")
    if data is not None and not isinstance(data, dict):
        result.changes_made.append(f"Replaced non-object data on edge '{edge['id']}'")
        edge["data"] = {}
    label = edge.get("label")
    if label is not None and not isinstance(label, str):
        result.changes_made.append(f"Replaced non-string label on edge '{edge['id']}'")
        edge["label"] = str(label)
    return edge


def _repair_nodes(raw_nodes: Any, result: RepairResult) -> List[Dict[str, Any]]:
    if not isinstance(raw_nodes, list):
        if raw_nodes is not None:
            result.changes_made.append("Replaced non-list nodes with an empty list")
        return []

    kept: List[Dict[str, Any]] = []
    seen = set()
    for index, raw in enumerate(raw_nodes):
        if not isinstance(raw, dict) or not isinstance(raw.get("id"), str) or not raw["id"]:
            result.changes_made.append(f"Dropped invalid node entry at index {index}")
            result.nodes_dropped += 1
            continue

        node_id = raw["id"]
        if NodeType.parse(raw.get("type")) is None:
            result.changes_made.append(f"Dropped node '{node_id}' with unknown type {raw.get('type')!r}")
            result.nodes_dropped += 1
            continue

        if node_id in seen:
            result.changes_made.append(f"Dropped duplicate node id '{node_id}'")
            result.nodes_dropped += 1
            continue

        seen.add(node_id)
        kept.append(_normalise_node(raw, result))
    return kept


def _repair_edges(raw_edges: Any, node_ids: set, result: RepairResult) -> List[Dict[str, Any]]:
    if not isinstance(raw_edges, list):
        if raw_edges is not None:
            result.changes_made.append("Replaced non-list edges with an empty list")
        return []

    candidates: List[Dict[str, Any]] = []
    seen_ids = set()
    for index, raw in enumerate(raw_edges):
        if not isinstance(raw, dict) or not isinstance(raw.get("id"), str) or not raw["id"]:
            result.changes_made.append(f"Dropped invalid edge entry at index {index}")
            result.edges_dropped += 1
            continue

        edge_id = raw["id"]
        source, target = raw.get("source"), raw.get("target")
        if not isinstance(source, str) or not isinstance(target, str):
            result.changes_made.append(f"Dropped edge '{edge_id}' with a non-string endpoint")
            result.edges_dropped += 1
            continue

        if source not in node_ids or target not in node_ids:
            result.changes_made.append(f"Dropped edge '{edge_id}' with a missing endpoint")
            result.edges_dropped += 1
            continue

        if source == target:
            result.changes_made.append(f"Dropped self-loop edge '{edge_id}'")
            result.edges_dropped += 1
            continue

        if edge_id in seen_ids:
            result.changes_made.append(f"Dropped duplicate edge id '{edge_id}'")
            result.edges_dropped += 1
            continue

        seen_ids.add(edge_id)
        candidates.append(_normalise_edge(raw, result))

    # Parallel edges: the most recent connection wins
    last_for_pair: Dict[frozenset, int] = {}
    for index, raw in enumerate(candidates):
        last_for_pair[frozenset((raw["source"], raw["target"]))] = index

    kept = []
    for index, raw in enumerate(candidates):
        if last_for_pair[frozenset((raw["source"], raw["target"]))] != index:
            result.changes_made.append(f"Dropped parallel edge '{raw['id']}'")
            result.edges_dropped += 1
            continue
        kept.append(raw)
    return kept


def repair_snapshot(raw: Any) -> Tuple[Dict[str, Any], RepairResult]:
    """
    Return a cleaned copy of a stored snapshot plus what was changed.

    The input is never mutated. A non-object snapshot becomes an empty
    graph with a fresh id.
    """
    result = RepairResult()

    if not isinstance(raw, dict):
        result.changes_made.append("Snapshot was not an object; started an empty graph")
        raw = {}

    snapshot = dict(raw)
    if not isinstance(snapshot.get("id"), str) or not snapshot["id"]:
        snapshot["id"] = f"arch-{uuid.uuid4().hex}"
        result.changes_made.append("Assigned a missing graph id")

    metadata = snapshot.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        snapshot["metadata"] = {}
        result.changes_made.append("Replaced non-object graph metadata")

    for key in ("name", "description"):
        value = snapshot.get(key)
        if value is not None and not isinstance(value, str):
            snapshot[key] = str(value)
            result.changes_made.append(f"Replaced non-string graph {key}")

    nodes = _repair_nodes(raw.get("nodes"), result)
    edges = _repair_edges(raw.get("edges"), {n["id"] for n in nodes}, result)
    snapshot["nodes"] = nodes
    snapshot["edges"] = edges

    if result.repaired:
        logger.warning(
            "snapshot_repaired",
            graph_id=snapshot["id"],
            nodes_dropped=result.nodes_dropped,
            edges_dropped=result.edges_dropped,
        )
    return snapshot, result
