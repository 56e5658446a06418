"""
Validation module for architecture graphs and stored snapshots.
"""

from app.validation.graph_repair import RepairResult, repair_snapshot
from app.validation.graph_validator import (
    GraphValidationResult,
    GraphValidator,
    ValidationIssue,
    ValidationSeverity,
    validate_graph,
)

__all__ = [
    "GraphValidationResult",
    "GraphValidator",
    "RepairResult",
    "ValidationIssue",
    "ValidationSeverity",
    "repair_snapshot",
    "validate_graph",
]
