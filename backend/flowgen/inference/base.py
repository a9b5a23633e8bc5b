import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class EngineTaskRequest:
    tenant_id: str
    task_type: str
    payload: Dict[str, Any] = field(default_factory=dict)


class AIEngine(ABC):
    @abstractmethod
    def execute_task(
        self,
        request: EngineTaskRequest,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        """Run a registered task and return its (untrusted) JSON result."""
        pass
