"""
Graph Validator - reports structural problems in an architecture graph.

Catches issues like:
- Duplicate node / edge ids
- Edges pointing at missing nodes
- Self-loops and parallel edges
- Empty component names
- Orphaned components (no connections)

The editor never produces the first four; they show up only in graphs
built outside it. The report is read-only and never changes the graph.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from app.graph.graph_schema import Graph


class ValidationSeverity(Enum):
    ERROR = "error"      # Graph breaks a structural invariant
    WARNING = "warning"  # Graph is valid but probably unfinished


@dataclass
class ValidationIssue:
    """A single validation issue found in the graph"""
    severity: ValidationSeverity
    code: str
    message: str
    node_id: Optional[str] = None
    edge_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "edge_id": self.edge_id,
        }


@dataclass
class GraphValidationResult:
    issues: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    @property
    def is_valid(self) -> bool:
        return self.error_count == 0

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        status = "Valid" if self.is_valid else "Invalid"
        return f"{status} | Errors: {self.error_count}, Warnings: {self.warning_count}"


class GraphValidator:
    """
    Usage:
        result = GraphValidator().validate(graph)
        if not result.is_valid:
            for issue in result.issues:
                ...
    """

    def validate(self, graph: Graph) -> GraphValidationResult:
        issues: List[ValidationIssue] = []
        issues.extend(self._check_ids(graph))
        issues.extend(self._check_edges(graph))
        issues.extend(self._check_names(graph))
        issues.extend(self._check_orphans(graph))

        components = graph.component_nodes()
        stats = {
            "total_nodes": len(components),
            "total_edges": len(graph.edges),
            "group_nodes": len(graph.nodes) - len(components),
        }
        return GraphValidationResult(issues=issues, stats=stats)

    def _check_ids(self, graph: Graph) -> List[ValidationIssue]:
        issues = []
        for node_id, count in Counter(n.id for n in graph.nodes).items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_NODE_ID",
                    message=f"Node id '{node_id}' appears {count} times",
                    node_id=node_id,
                ))
        for edge_id, count in Counter(e.id for e in graph.edges).items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_EDGE_ID",
                    message=f"Edge id '{edge_id}' appears {count} times",
                    edge_id=edge_id,
                ))
        return issues

    def _check_edges(self, graph: Graph) -> List[ValidationIssue]:
        issues = []
        node_ids = graph.node_ids()
        pairs: Dict[frozenset, str] = {}

        for edge in graph.edges:
            if edge.source not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_SOURCE_NODE",
                    message=f"Edge '{edge.id}' starts at unknown node '{edge.source}'",
                    edge_id=edge.id,
                ))
            if edge.target not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_TARGET_NODE",
                    message=f"Edge '{edge.id}' ends at unknown node '{edge.target}'",
                    edge_id=edge.id,
                ))
            if edge.source == edge.target:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="SELF_LOOP",
                    message=f"Edge '{edge.id}' connects '{edge.source}' to itself",
                    edge_id=edge.id,
                ))
                continue

            pair = edge.pair()
            if pair in pairs:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="PARALLEL_EDGE",
                    message=f"Edge '{edge.id}' duplicates connection '{pairs[pair]}'",
                    edge_id=edge.id,
                ))
            else:
                pairs[pair] = edge.id
        return issues

    def _check_names(self, graph: Graph) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="EMPTY_NAME",
                message=f"Node '{n.id}' has no name",
                node_id=n.id,
            )
            for n in graph.component_nodes()
            if not (n.data.name or "").strip()
        ]

    def _check_orphans(self, graph: Graph) -> List[ValidationIssue]:
        connected = set()
        for edge in graph.edges:
            connected.add(edge.source)
            connected.add(edge.target)

        return [
            ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="ORPHANED_NODE",
                message=f"Node '{n.data.name or n.id}' has no connections",
                node_id=n.id,
            )
            for n in graph.component_nodes()
            if n.id not in connected
        ]


def validate_graph(graph: Graph) -> GraphValidationResult:
    return GraphValidator().validate(graph)
