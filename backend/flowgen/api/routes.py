from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from flowgen.ir.errors import OrchestratorErrorKind
from flowgen.pipeline.orchestrator import WorkflowOrchestrator, get_orchestrator
from flowgen.schemas import OrchestrateRequest

router = APIRouter(
    prefix="",
    tags=["automations"],
)

STATUS_BY_KIND = {
    OrchestratorErrorKind.RATE_LIMIT_EXCEEDED: 429,
    OrchestratorErrorKind.SECURITY_REJECTED: 422,
    OrchestratorErrorKind.GENERATION_SCHEMA_INVALID: 502,
    OrchestratorErrorKind.GENERATION_REPORTED_FAILURE: 422,
    OrchestratorErrorKind.GRAPH_LOGIC_INVALID: 502,
    OrchestratorErrorKind.UNEXPECTED_ERROR: 500,
    OrchestratorErrorKind.CANCELLED: 499,
}


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/automations/orchestrate")
def orchestrate_workflow(
    request: OrchestrateRequest,
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    result = orchestrator.orchestrate(request.tenant_id, request.prompt)

    status_code = 200
    if not result.success:
        status_code = STATUS_BY_KIND.get(result.error_kind, 500)

    headers = {}
    if result.error_kind == OrchestratorErrorKind.RATE_LIMIT_EXCEEDED:
        headers["Retry-After"] = str(result.rate_limit_info.reset_in_seconds)

    return JSONResponse(
        status_code=status_code,
        content=result.to_response(),
        headers=headers,
    )
