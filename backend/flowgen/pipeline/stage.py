from abc import ABC, abstractmethod

from flowgen.ir.validation import ValidationResult
from flowgen.pipeline.context import OrchestrationContext, PipelineState


class PipelineStage(ABC):
    name: str
    state: PipelineState

    @abstractmethod
    def run(self, context: OrchestrationContext) -> ValidationResult:
        """
        Must:
        - read from context
        - write to context
        - call context.fail(...) on failure
        - NEVER call other stages
        """
        pass
