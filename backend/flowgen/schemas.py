from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrchestrateRequest(BaseModel):
    """Request body for workflow generation"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tenant_id: str = Field(min_length=1)
    prompt: str
