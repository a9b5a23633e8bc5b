from enum import Enum


class OrchestratorErrorKind(Enum):
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    SECURITY_REJECTED = "security_rejected"
    GENERATION_SCHEMA_INVALID = "generation_schema_invalid"
    GENERATION_REPORTED_FAILURE = "generation_reported_failure"
    GRAPH_LOGIC_INVALID = "graph_logic_invalid"
    UNEXPECTED_ERROR = "unexpected_error"
    CANCELLED = "cancelled"


class FlowgenError(Exception):
    """Base class for errors raised inside the pipeline."""


class EngineError(FlowgenError):
    """The AI engine could not be reached or refused the task."""


class EngineTimeout(EngineError):
    pass


class EngineCancelled(EngineError):
    pass
