from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class LayoutedNode(BaseModel):
    """A generated node with its computed top-left anchor."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    label: str
    config: Dict[str, Any] = Field(default_factory=dict)
    position: Position

    def to_flow(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "position": self.position.model_dump(),
            "data": {"label": self.label, **self.config},
        }


class FlowEdge(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    source: str
    target: str
    source_handle: str = Field(default="default", alias="sourceHandle")
    type: str = "smoothstep"
    animated: bool = True
