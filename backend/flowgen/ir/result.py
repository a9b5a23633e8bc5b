from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from flowgen.ir.errors import OrchestratorErrorKind
from flowgen.ir.flow import FlowEdge, LayoutedNode


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RateLimitInfo(_CamelModel):
    remaining: int
    reset_in_seconds: int


class WorkflowPayload(_CamelModel):
    name: str
    description: str
    nodes: List[LayoutedNode] = Field(default_factory=list)
    edges: List[FlowEdge] = Field(default_factory=list)


class OrchestratorResult(_CamelModel):
    """The only artifact returned across the pipeline boundary."""

    success: bool
    workflow: Optional[WorkflowPayload] = None
    error: Optional[str] = None
    error_kind: Optional[OrchestratorErrorKind] = None
    reasoning: Optional[str] = None
    rate_limit_info: RateLimitInfo

    def to_response(self) -> dict:
        """JSON body for the editor: camelCase keys, editor-shaped nodes."""
        body = self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude={"workflow"},
        )
        if self.workflow is not None:
            body["workflow"] = {
                "name": self.workflow.name,
                "description": self.workflow.description,
                "nodes": [n.to_flow() for n in self.workflow.nodes],
                "edges": [
                    e.model_dump(by_alias=True) for e in self.workflow.edges
                ],
            }
        return body
