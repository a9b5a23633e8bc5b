import json
import threading
import time

import pytest
import requests

from flowgen.inference.base import EngineTaskRequest
from flowgen.inference.engine_client import ChatCompletionsEngine
from flowgen.inference.tasks import ORCHESTRATE_WORKFLOW_TASK
from flowgen.ir.errors import EngineCancelled, EngineError, EngineTimeout


class FakeResponse:
    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.body, str):
            return json.loads(self.body)
        return self.body


class FakeSession:
    def __init__(self, response=None, error=None, on_post=None):
        self.response = response
        self.error = error
        self.on_post = on_post
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.on_post:
            self.on_post()
        if self.error:
            raise self.error
        return self.response


def _completion(content):
    return FakeResponse({"choices": [{"message": {"role": "assistant", "content": content}}]})


def _request(prompt="Cuando llegue un lead enviar email"):
    return EngineTaskRequest(
        tenant_id="tenant-9",
        task_type=ORCHESTRATE_WORKFLOW_TASK,
        payload={"userPrompt": prompt},
    )


def _engine(session, **kwargs):
    return ChatCompletionsEngine(
        base_url="http://engine.local/v1/",
        model="llama3",
        api_key=kwargs.pop("api_key", ""),
        default_timeout=30,
        session=session,
    )


def test_payload_and_endpoint():
    session = FakeSession(response=_completion('{"success": true}'))

    result = _engine(session).execute_task(_request(), timeout=7)

    assert result == {"success": True}
    call = session.calls[0]
    assert call["url"] == "http://engine.local/v1/chat/completions"
    assert call["timeout"] == 7
    assert "Authorization" not in call["headers"]

    body = call["json"]
    assert body["model"] == "llama3"
    assert body["temperature"] == 0.3
    assert body["max_tokens"] == 4000
    assert body["user"] == "tenant-9"
    assert body["response_format"] == {"type": "json_object"}
    assert body["messages"][0]["role"] == "system"
    assert "Cuando llegue un lead enviar email" in body["messages"][1]["content"]


def test_api_key_and_default_timeout():
    session = FakeSession(response=_completion("{}"))

    _engine(session, api_key="sk-test").execute_task(_request())

    call = session.calls[0]
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["timeout"] == 30


def test_markdown_fences_are_stripped():
    session = FakeSession(response=_completion('```json\n{"success": false, "error": "x"}\n```'))

    assert _engine(session).execute_task(_request()) == {"success": False, "error": "x"}


def test_undecodable_content_is_returned_as_text():
    session = FakeSession(response=_completion("no puedo ayudarte"))

    assert _engine(session).execute_task(_request()) == "no puedo ayudarte"


def test_timeout_is_mapped():
    session = FakeSession(error=requests.Timeout("read timed out"))

    with pytest.raises(EngineTimeout):
        _engine(session).execute_task(_request())


def test_http_error_is_mapped():
    session = FakeSession(response=FakeResponse({}, status_code=503))

    with pytest.raises(EngineError):
        _engine(session).execute_task(_request())


def test_malformed_envelope():
    session = FakeSession(response=FakeResponse({"choices": []}))

    with pytest.raises(EngineError):
        _engine(session).execute_task(_request())


def test_unknown_task():
    session = FakeSession(response=_completion("{}"))
    request = EngineTaskRequest(tenant_id="t", task_type="nope.v0")

    with pytest.raises(EngineError):
        _engine(session).execute_task(request)
    assert session.calls == []


def test_cancelled_before_call():
    cancel = threading.Event()
    cancel.set()
    session = FakeSession(response=_completion("{}"))

    with pytest.raises(EngineCancelled):
        _engine(session).execute_task(_request(), cancel_event=cancel)
    assert session.calls == []


def test_cancelled_while_waiting():
    cancel = threading.Event()
    session = FakeSession(response=_completion("{}"), on_post=cancel.set)

    with pytest.raises(EngineCancelled):
        _engine(session).execute_task(_request(), cancel_event=cancel)


def test_cancel_interrupts_a_slow_call():
    cancel = threading.Event()
    session = FakeSession(response=_completion("{}"), on_post=lambda: time.sleep(2))
    timer = threading.Timer(0.1, cancel.set)
    timer.start()

    started = time.monotonic()
    with pytest.raises(EngineCancelled):
        _engine(session).execute_task(_request(), cancel_event=cancel)
    elapsed = time.monotonic() - started
    timer.cancel()

    assert elapsed < 1.0


def test_transport_error_after_cancel_reports_cancel():
    cancel = threading.Event()
    session = FakeSession(error=requests.ConnectionError("reset by peer"), on_post=cancel.set)

    with pytest.raises(EngineCancelled):
        _engine(session).execute_task(_request(), cancel_event=cancel)


def test_transport_error_without_cancel_is_engine_error():
    session = FakeSession(error=requests.ConnectionError("reset by peer"))

    with pytest.raises(EngineError) as excinfo:
        _engine(session).execute_task(_request(), cancel_event=threading.Event())
    assert not isinstance(excinfo.value, EngineCancelled)
