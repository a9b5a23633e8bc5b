import logging
import math
from typing import Optional

from flowgen.compiler import compile_workflow
from flowgen.compiler.layout import LayoutOptions
from flowgen.i18n import render
from flowgen.inference.base import AIEngine, EngineTaskRequest
from flowgen.inference.tasks import ORCHESTRATE_WORKFLOW_TASK
from flowgen.ir.errors import EngineCancelled, EngineError, OrchestratorErrorKind
from flowgen.ir.validation import ValidationResult
from flowgen.pipeline.context import OrchestrationContext, PipelineState
from flowgen.pipeline.context_guard import ContextGuard
from flowgen.pipeline.rate_limiter import RateLimiter
from flowgen.pipeline.schema_validator import parse_orchestrator_response
from flowgen.pipeline.stage import PipelineStage
from flowgen.validation.graph_validator import GraphValidator

logger = logging.getLogger(__name__)


class RateCheckStage(PipelineStage):
    name = "rate_check"
    state = PipelineState.RATE_CHECK

    def __init__(self, limiter: RateLimiter):
        self.limiter = limiter

    def run(self, context):
        decision = self.limiter.check(context.tenant_id)
        context.rate_limit = decision

        if not decision.allowed:
            minutes = math.ceil(decision.reset_in_seconds / 60)
            return context.fail(
                OrchestratorErrorKind.RATE_LIMIT_EXCEEDED,
                render("rate_limit_exceeded", context.locale, minutes=minutes),
            )
        return ValidationResult.success()


class ContextCheckStage(PipelineStage):
    name = "context_check"
    state = PipelineState.CONTEXT_CHECK

    def __init__(self, guard: ContextGuard):
        self.guard = guard

    def run(self, context):
        verdict = self.guard.validate(context.prompt)
        if not verdict.valid:
            return context.fail(OrchestratorErrorKind.SECURITY_REJECTED, verdict.reason)

        context.sanitized_prompt = verdict.sanitized_prompt
        return ValidationResult.success()


class GenerateStage(PipelineStage):
    name = "generate"
    state = PipelineState.GENERATE

    def __init__(self, engine: AIEngine, timeout: Optional[float] = None):
        self.engine = engine
        self.timeout = timeout

    def _cancelled(self, context):
        return context.fail(
            OrchestratorErrorKind.CANCELLED, render("cancelled", context.locale)
        )

    def run(self, context):
        if context.cancelled:
            return self._cancelled(context)

        request = EngineTaskRequest(
            tenant_id=context.tenant_id,
            task_type=ORCHESTRATE_WORKFLOW_TASK,
            payload={"userPrompt": context.sanitized_prompt},
        )

        try:
            context.raw_response = self.engine.execute_task(
                request,
                timeout=self.timeout,
                cancel_event=context.cancel_event,
            )
        except EngineCancelled:
            return self._cancelled(context)
        except EngineError:
            logger.error(
                "Engine call failed for tenant %s", context.tenant_id, exc_info=True
            )
            return context.fail(
                OrchestratorErrorKind.UNEXPECTED_ERROR,
                render("unexpected_error", context.locale),
            )

        if context.cancelled:
            return self._cancelled(context)
        return ValidationResult.success()


class SchemaValidateStage(PipelineStage):
    name = "schema_validate"
    state = PipelineState.SCHEMA_VALIDATE

    def run(self, context):
        parsed = parse_orchestrator_response(context.raw_response)

        if not parsed.is_valid:
            logger.error(
                "Schema validation failed for tenant %s: %s",
                context.tenant_id,
                parsed.errors,
            )
            return context.fail(
                OrchestratorErrorKind.GENERATION_SCHEMA_INVALID,
                render("generation_schema_invalid", context.locale),
            )

        response = parsed.value
        context.response = response

        # The engine itself declined
        if not response.success or response.workflow is None:
            return context.fail(
                OrchestratorErrorKind.GENERATION_REPORTED_FAILURE,
                response.error or render("generation_reported_failure", context.locale),
            )
        return ValidationResult.success()


class LogicValidateStage(PipelineStage):
    name = "logic_validate"
    state = PipelineState.LOGIC_VALIDATE

    def __init__(self, validator: GraphValidator):
        self.validator = validator

    def run(self, context):
        violations = self.validator.validate(context.response.workflow)
        if violations:
            return context.fail(
                OrchestratorErrorKind.GRAPH_LOGIC_INVALID, ". ".join(violations)
            )
        return ValidationResult.success()


class LayoutStage(PipelineStage):
    name = "layout"
    state = PipelineState.LAYOUT

    def __init__(self, options: Optional[LayoutOptions] = None):
        self.options = options

    def run(self, context):
        context.nodes, context.edges = compile_workflow(
            context.response.workflow, self.options
        )
        return ValidationResult.success()
