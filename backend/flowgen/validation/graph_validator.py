"""
Graph Validator - checks the logic of a schema-valid workflow.

Catches:
- Missing trigger / more than one trigger
- Edges pointing at node ids that do not exist
- Nodes nothing connects into

All violations are collected so one attempt yields one complete diagnosis.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set

from flowgen.config import LOCALE, STRICT_REACHABILITY
from flowgen.i18n import render
from flowgen.ir.workflow import Workflow

logger = logging.getLogger(__name__)


class ViolationCode(Enum):
    MISSING_TRIGGER = "missing_trigger"
    MULTIPLE_TRIGGERS = "multiple_triggers"
    UNKNOWN_EDGE_SOURCE = "unknown_edge_source"
    UNKNOWN_EDGE_TARGET = "unknown_edge_target"
    DISCONNECTED_NODE = "disconnected_node"
    UNREACHABLE_NODE = "unreachable_node"


@dataclass(frozen=True)
class GraphViolation:
    code: ViolationCode
    subject: Optional[str] = None   # offending node id or label

    def render(self, locale: str = LOCALE) -> str:
        return render(f"graph.{self.code.value}", locale, subject=self.subject or "")


class GraphValidator:
    """
    Usage:
        validator = GraphValidator()
        messages = validator.validate(workflow)
        if messages:
            ...

    By default connectivity is the one-hop "has an incoming edge" check.
    ``strict_reachability=True`` requires every node to be reachable from
    the trigger instead.
    """

    TRIGGER_TYPE = "trigger"

    def __init__(self, strict_reachability: bool = STRICT_REACHABILITY, locale: str = LOCALE):
        self.strict_reachability = strict_reachability
        self.locale = locale

    def find_violations(self, workflow: Workflow) -> List[GraphViolation]:
        violations: List[GraphViolation] = []
        triggers = [n for n in workflow.nodes if n.type == self.TRIGGER_TYPE]

        violations.extend(self._check_trigger_cardinality(len(triggers)))
        violations.extend(self._check_edge_references(workflow))

        trigger_id = triggers[0].id if triggers else None
        if self.strict_reachability:
            violations.extend(self._check_reachability(workflow, trigger_id))
        else:
            violations.extend(self._check_incoming_edges(workflow, trigger_id))

        if violations:
            logger.info(
                "Workflow '%s' has %d logic violations: %s",
                workflow.name,
                len(violations),
                [v.code.value for v in violations],
            )
        return violations

    def validate(self, workflow: Workflow) -> List[str]:
        """Rendered violations; empty list means valid."""
        return [v.render(self.locale) for v in self.find_violations(workflow)]

    # ----------------------------
    # Checks
    # ----------------------------

    def _check_trigger_cardinality(self, trigger_count: int) -> List[GraphViolation]:
        if trigger_count == 0:
            return [GraphViolation(ViolationCode.MISSING_TRIGGER)]
        if trigger_count > 1:
            return [GraphViolation(ViolationCode.MULTIPLE_TRIGGERS)]
        return []

    def _check_edge_references(self, workflow: Workflow) -> List[GraphViolation]:
        issues = []
        node_ids = {n.id for n in workflow.nodes}
        for edge in workflow.edges:
            if edge.source not in node_ids:
                issues.append(GraphViolation(ViolationCode.UNKNOWN_EDGE_SOURCE, edge.source))
            if edge.target not in node_ids:
                issues.append(GraphViolation(ViolationCode.UNKNOWN_EDGE_TARGET, edge.target))
        return issues

    def _check_incoming_edges(
        self, workflow: Workflow, trigger_id: Optional[str]
    ) -> List[GraphViolation]:
        connected: Set[str] = {e.target for e in workflow.edges}
        if trigger_id:
            connected.add(trigger_id)

        return [
            GraphViolation(ViolationCode.DISCONNECTED_NODE, node.label)
            for node in workflow.nodes
            if node.type != self.TRIGGER_TYPE and node.id not in connected
        ]

    def _check_reachability(
        self, workflow: Workflow, trigger_id: Optional[str]
    ) -> List[GraphViolation]:
        adjacency: Dict[str, List[str]] = defaultdict(list)
        for edge in workflow.edges:
            adjacency[edge.source].append(edge.target)

        reachable: Set[str] = set()
        if trigger_id:
            queue = deque([trigger_id])
            reachable.add(trigger_id)
            while queue:
                current = queue.popleft()
                for neighbor in adjacency.get(current, []):
                    if neighbor not in reachable:
                        reachable.add(neighbor)
                        queue.append(neighbor)

        return [
            GraphViolation(ViolationCode.UNREACHABLE_NODE, node.label)
            for node in workflow.nodes
            if node.type != self.TRIGGER_TYPE and node.id not in reachable
        ]


def validate_workflow_logic(workflow: Workflow, strict: bool = STRICT_REACHABILITY) -> List[str]:
    """Convenience function to validate a workflow."""
    return GraphValidator(strict_reachability=strict).validate(workflow)
