import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from flowgen.config import LOCALE
from flowgen.ir.errors import OrchestratorErrorKind
from flowgen.ir.flow import FlowEdge, LayoutedNode
from flowgen.ir.validation import ValidationResult
from flowgen.ir.workflow import OrchestratorResponse
from flowgen.pipeline.rate_limiter import RateLimitDecision


class PipelineState(Enum):
    RATE_CHECK = "rate_check"
    CONTEXT_CHECK = "context_check"
    GENERATE = "generate"
    SCHEMA_VALIDATE = "schema_validate"
    LOGIC_VALIDATE = "logic_validate"
    LAYOUT = "layout"
    DONE = "done"
    FAILED = "failed"


@dataclass
class OrchestrationContext:
    # Raw input (authoritative)
    tenant_id: str
    prompt: str
    locale: str = LOCALE
    cancel_event: Optional[threading.Event] = None

    state: PipelineState = PipelineState.RATE_CHECK

    # Stage outputs
    rate_limit: Optional[RateLimitDecision] = None
    sanitized_prompt: Optional[str] = None
    raw_response: Any = None
    response: Optional[OrchestratorResponse] = None
    nodes: List[LayoutedNode] = field(default_factory=list)
    edges: List[FlowEdge] = field(default_factory=list)

    error_kind: Optional[OrchestratorErrorKind] = None
    errors: list[str] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def fail(self, kind: OrchestratorErrorKind, message: str) -> ValidationResult:
        """Move to the absorbing FAILED state."""
        self.state = PipelineState.FAILED
        self.error_kind = kind
        self.errors.append(message)
        return ValidationResult.failure([message])
