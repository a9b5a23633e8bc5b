"""
Workflow Orchestrator - the only entry point callers use.

RATE_CHECK -> CONTEXT_CHECK -> GENERATE -> SCHEMA_VALIDATE
    -> LOGIC_VALIDATE -> LAYOUT -> DONE

Any stage may move the run to FAILED, which is absorbing. Stages never
retry and no partial workflow is ever returned.
"""

import logging
import threading
from typing import List, Optional

from flowgen.compiler.layout import LayoutOptions
from flowgen.config import ENGINE_TIMEOUT_SECONDS, LOCALE, STRICT_REACHABILITY
from flowgen.i18n import render
from flowgen.inference.base import AIEngine
from flowgen.ir.errors import OrchestratorErrorKind
from flowgen.ir.result import OrchestratorResult, RateLimitInfo, WorkflowPayload
from flowgen.pipeline.context import OrchestrationContext, PipelineState
from flowgen.pipeline.context_guard import ContextGuard
from flowgen.pipeline.rate_limiter import InMemoryRateLimiter, RateLimiter
from flowgen.pipeline.stage import PipelineStage
from flowgen.pipeline.stages import (
    ContextCheckStage,
    GenerateStage,
    LayoutStage,
    LogicValidateStage,
    RateCheckStage,
    SchemaValidateStage,
)
from flowgen.validation.graph_validator import GraphValidator

logger = logging.getLogger(__name__)


class WorkflowOrchestrator:
    def __init__(
        self,
        engine: AIEngine,
        rate_limiter: Optional[RateLimiter] = None,
        guard: Optional[ContextGuard] = None,
        graph_validator: Optional[GraphValidator] = None,
        layout_options: Optional[LayoutOptions] = None,
        timeout: float = ENGINE_TIMEOUT_SECONDS,
        locale: str = LOCALE,
    ):
        self.locale = locale
        self.rate_limiter = rate_limiter or InMemoryRateLimiter()

        self.stages: List[PipelineStage] = [
            RateCheckStage(self.rate_limiter),
            ContextCheckStage(guard or ContextGuard(locale=locale)),
            GenerateStage(engine, timeout=timeout),
            SchemaValidateStage(),
            LogicValidateStage(
                graph_validator
                or GraphValidator(strict_reachability=STRICT_REACHABILITY, locale=locale)
            ),
            LayoutStage(layout_options),
        ]

    def run(
        self,
        tenant_id: str,
        prompt: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> OrchestrationContext:
        context = OrchestrationContext(
            tenant_id=tenant_id,
            prompt=prompt,
            locale=self.locale,
            cancel_event=cancel_event,
        )

        try:
            for stage in self.stages:
                context.state = stage.state
                result = stage.run(context)

                # Hard stop on failure
                if not result.is_valid:
                    logger.info(
                        "Orchestration for tenant %s stopped at %s: %s",
                        tenant_id,
                        stage.name,
                        context.error_kind.value if context.error_kind else "failed",
                    )
                    return context
        except Exception:
            logger.exception(
                "Unexpected error during %s for tenant %s",
                context.state.value,
                tenant_id,
            )
            context.fail(
                OrchestratorErrorKind.UNEXPECTED_ERROR,
                render("unexpected_error", self.locale),
            )
            return context

        context.state = PipelineState.DONE
        return context

    def orchestrate(
        self,
        tenant_id: str,
        prompt: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> OrchestratorResult:
        context = self.run(tenant_id, prompt, cancel_event)
        return build_result(context)


def build_result(context: OrchestrationContext) -> OrchestratorResult:
    decision = context.rate_limit
    rate_limit_info = RateLimitInfo(
        remaining=decision.remaining if decision else 0,
        reset_in_seconds=decision.reset_in_seconds if decision else 0,
    )

    if context.state != PipelineState.DONE:
        return OrchestratorResult(
            success=False,
            error=context.errors[-1] if context.errors else None,
            error_kind=context.error_kind,
            rate_limit_info=rate_limit_info,
        )

    workflow = context.response.workflow
    return OrchestratorResult(
        success=True,
        workflow=WorkflowPayload(
            name=workflow.name,
            description=workflow.description,
            nodes=context.nodes,
            edges=context.edges,
        ),
        reasoning=context.response.reasoning,
        rate_limit_info=rate_limit_info,
    )


# Global orchestrator instance
_default_orchestrator: Optional[WorkflowOrchestrator] = None
_default_lock = threading.Lock()


def get_orchestrator() -> WorkflowOrchestrator:
    """Get or create the process-wide orchestrator."""
    global _default_orchestrator
    with _default_lock:
        if _default_orchestrator is None:
            from flowgen.inference.config import get_ai_engine

            _default_orchestrator = WorkflowOrchestrator(engine=get_ai_engine())
        return _default_orchestrator


def orchestrate(
    tenant_id: str,
    prompt: str,
    cancel_event: Optional[threading.Event] = None,
) -> OrchestratorResult:
    return get_orchestrator().orchestrate(tenant_id, prompt, cancel_event)
