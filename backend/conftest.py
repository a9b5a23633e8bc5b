"""Shared fixtures: a scripted AI engine and a hand-driven clock."""

import pytest

from flowgen.inference.base import AIEngine
from flowgen.pipeline.context_guard import ContextGuard
from flowgen.pipeline.orchestrator import WorkflowOrchestrator
from flowgen.pipeline.rate_limiter import InMemoryRateLimiter

VALID_PROMPT = "Cuando un cliente escriba 'hola' enviar un mensaje de bienvenida"


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEngine(AIEngine):
    """Returns a canned response (or raises it) and records every request."""

    def __init__(self, response=None, error: Exception = None, on_call=None):
        self.response = response
        self.error = error
        self.on_call = on_call
        self.requests = []
        self.timeouts = []

    def execute_task(self, request, timeout=None, cancel_event=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return self.response


def make_workflow_response(nodes=None, edges=None, **extra) -> dict:
    if nodes is None:
        nodes = [
            {"id": "node_1", "type": "trigger", "label": "Detectar Hola",
             "config": {"triggerType": "keyword", "keyword": "hola", "channels": ["whatsapp"]}},
            {"id": "node_2", "type": "action", "label": "Saludar",
             "config": {"message": "¡Hola! Bienvenido"}},
        ]
    if edges is None:
        edges = [{"source": "node_1", "target": "node_2"}]

    body = {
        "success": True,
        "workflow": {
            "name": "Bot de Bienvenida",
            "description": "Saluda a quien escriba hola",
            "nodes": nodes,
            "edges": edges,
        },
        "reasoning": "Flujo lineal de bienvenida",
    }
    body.update(extra)
    return body


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return InMemoryRateLimiter(max_requests=10, window_seconds=3600, clock=clock)


@pytest.fixture
def guard():
    return ContextGuard(locale="es", topic_terms_file=None)


@pytest.fixture
def engine():
    return FakeEngine(response=make_workflow_response())


@pytest.fixture
def orchestrator(engine, limiter, guard):
    return WorkflowOrchestrator(
        engine=engine,
        rate_limiter=limiter,
        guard=guard,
        timeout=5,
        locale="es",
    )
