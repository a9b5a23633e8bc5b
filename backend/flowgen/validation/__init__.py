"""
Validation module for generated workflow graphs.
"""

from flowgen.validation.graph_validator import (
    GraphValidator,
    GraphViolation,
    ViolationCode,
    validate_workflow_logic,
)

__all__ = [
    "GraphValidator",
    "GraphViolation",
    "ViolationCode",
    "validate_workflow_logic",
]
