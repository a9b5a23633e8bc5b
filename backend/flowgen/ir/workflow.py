"""
Workflow IR - the typed shape of what the AI engine is allowed to return.

Every node type is its own model with its own config model, discriminated
on ``type``. Config fields mirror the node catalogue given to the engine in
``flowgen.inference.prompt``; all of them are optional and unknown keys are
kept, so only the fields we know about are type-checked.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


NODE_TYPES = (
    "trigger",
    "action",
    "condition",
    "wait",
    "wait_input",
    "crm",
    "email",
    "sms",
    "http",
    "ai_agent",
    "ab_test",
    "billing",
    "notification",
    "variable",
    "buttons",
    "tag",
    "stage",
)

EdgeHandle = Literal["default", "yes", "no", "a", "b", "c"]

MAX_NODES = 20
MAX_LABEL_LENGTH = 50
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


# ============================================================
# NODE CONFIGS
# ============================================================

class NodeConfig(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def as_data(self) -> dict:
        """Wire-shaped config (camelCase keys, unset fields dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TriggerConfig(NodeConfig):
    trigger_type: Optional[
        Literal[
            "webhook",
            "first_contact",
            "keyword",
            "business_hours",
            "outside_hours",
            "media_received",
        ]
    ] = None
    channels: Optional[List[str]] = None
    keyword: Optional[str] = None


class ActionConfig(NodeConfig):
    message: Optional[str] = None


class ConditionConfig(NodeConfig):
    field: Optional[str] = None
    operator: Optional[Literal["==", "!=", "contains", ">", "<"]] = None
    value: Optional[str] = None


class WaitConfig(NodeConfig):
    duration: Optional[float] = None
    unit: Optional[Literal["seconds", "minutes", "hours", "days"]] = None


class WaitInputConfig(NodeConfig):
    timeout: Optional[float] = None
    unit: Optional[Literal["minutes", "hours"]] = None
    variable_name: Optional[str] = None


class CrmConfig(NodeConfig):
    action_type: Optional[
        Literal["create_lead", "update_lead", "add_tag", "update_stage"]
    ] = None
    tag: Optional[str] = None
    stage: Optional[str] = None


class EmailConfig(NodeConfig):
    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


class SmsConfig(NodeConfig):
    to: Optional[str] = None
    body: Optional[str] = None


class HttpConfig(NodeConfig):
    method: Optional[Literal["GET", "POST", "PUT", "DELETE"]] = None
    url: Optional[str] = None
    headers: Optional[dict] = None
    body: Optional[str] = None


class AiAgentConfig(NodeConfig):
    model: Optional[str] = None
    prompt: Optional[str] = None
    output_variable: Optional[str] = None


class AbVariant(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    weight: float = Field(ge=0, le=100)


class AbTestConfig(NodeConfig):
    variants: Optional[List[AbVariant]] = None


class BillingConfig(NodeConfig):
    action_type: Optional[Literal["create_invoice", "create_quote", "send_quote"]] = None


class NotificationConfig(NodeConfig):
    title: Optional[str] = None
    message: Optional[str] = None
    priority: Optional[Literal["low", "medium", "high"]] = None


class VariableConfig(NodeConfig):
    action_type: Optional[Literal["set", "math"]] = None
    target_var: Optional[str] = None
    value: Optional[str] = None
    operator: Optional[Literal["+", "-", "*", "/"]] = None
    operand1: Optional[str] = None
    operand2: Optional[str] = None


class ButtonOption(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    title: str


class ButtonsConfig(NodeConfig):
    body: Optional[str] = None
    buttons: Optional[List[ButtonOption]] = Field(default=None, max_length=3)


class TagConfig(NodeConfig):
    tag: Optional[str] = None


class StageConfig(NodeConfig):
    stage: Optional[str] = None


# ============================================================
# NODES (tagged union on "type")
# ============================================================

class BaseNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=r"^node_\d+$")
    label: str = Field(min_length=1, max_length=MAX_LABEL_LENGTH)


class TriggerNode(BaseNode):
    type: Literal["trigger"]
    config: TriggerConfig = Field(default_factory=TriggerConfig)


class ActionNode(BaseNode):
    type: Literal["action"]
    config: ActionConfig = Field(default_factory=ActionConfig)


class ConditionNode(BaseNode):
    type: Literal["condition"]
    config: ConditionConfig = Field(default_factory=ConditionConfig)


class WaitNode(BaseNode):
    type: Literal["wait"]
    config: WaitConfig = Field(default_factory=WaitConfig)


class WaitInputNode(BaseNode):
    type: Literal["wait_input"]
    config: WaitInputConfig = Field(default_factory=WaitInputConfig)


class CrmNode(BaseNode):
    type: Literal["crm"]
    config: CrmConfig = Field(default_factory=CrmConfig)


class EmailNode(BaseNode):
    type: Literal["email"]
    config: EmailConfig = Field(default_factory=EmailConfig)


class SmsNode(BaseNode):
    type: Literal["sms"]
    config: SmsConfig = Field(default_factory=SmsConfig)


class HttpNode(BaseNode):
    type: Literal["http"]
    config: HttpConfig = Field(default_factory=HttpConfig)


class AiAgentNode(BaseNode):
    type: Literal["ai_agent"]
    config: AiAgentConfig = Field(default_factory=AiAgentConfig)


class AbTestNode(BaseNode):
    type: Literal["ab_test"]
    config: AbTestConfig = Field(default_factory=AbTestConfig)


class BillingNode(BaseNode):
    type: Literal["billing"]
    config: BillingConfig = Field(default_factory=BillingConfig)


class NotificationNode(BaseNode):
    type: Literal["notification"]
    config: NotificationConfig = Field(default_factory=NotificationConfig)


class VariableNode(BaseNode):
    type: Literal["variable"]
    config: VariableConfig = Field(default_factory=VariableConfig)


class ButtonsNode(BaseNode):
    type: Literal["buttons"]
    config: ButtonsConfig = Field(default_factory=ButtonsConfig)


class TagNode(BaseNode):
    type: Literal["tag"]
    config: TagConfig = Field(default_factory=TagConfig)


class StageNode(BaseNode):
    type: Literal["stage"]
    config: StageConfig = Field(default_factory=StageConfig)


GeneratedNode = Annotated[
    Union[
        TriggerNode,
        ActionNode,
        ConditionNode,
        WaitNode,
        WaitInputNode,
        CrmNode,
        EmailNode,
        SmsNode,
        HttpNode,
        AiAgentNode,
        AbTestNode,
        BillingNode,
        NotificationNode,
        VariableNode,
        ButtonsNode,
        TagNode,
        StageNode,
    ],
    Field(discriminator="type"),
]


# ============================================================
# EDGES / WORKFLOW
# ============================================================

class GeneratedEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    handle: Optional[EdgeHandle] = Field(
        default=None,
        validation_alias=AliasChoices("sourceHandle", "handle"),
    )


class Workflow(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    description: str = Field(max_length=MAX_DESCRIPTION_LENGTH)
    nodes: List[GeneratedNode] = Field(min_length=1, max_length=MAX_NODES)
    edges: List[GeneratedEdge] = Field(default_factory=list)

    @field_validator("nodes")
    @classmethod
    def _unique_node_ids(cls, nodes):
        seen: set[str] = set()
        for node in nodes:
            if node.id in seen:
                raise ValueError(f"duplicate node id '{node.id}'")
            seen.add(node.id)
        return nodes


# ---- Root envelope returned by the engine ----

class OrchestratorResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    workflow: Optional[Workflow] = None
    error: Optional[str] = None
    reasoning: Optional[str] = None
