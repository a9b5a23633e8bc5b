import concurrent.futures
import logging
import threading
from typing import Any, Optional

import requests

from flowgen.config import (
    AI_ENGINE_API_KEY,
    AI_ENGINE_BASE_URL,
    AI_ENGINE_MODEL,
    ENGINE_TIMEOUT_SECONDS,
)
from flowgen.inference.base import AIEngine, EngineTaskRequest
from flowgen.inference.tasks import get_task
from flowgen.ir.errors import EngineCancelled, EngineError, EngineTimeout
from flowgen.utils.json_extract import extract_json

logger = logging.getLogger(__name__)

CANCEL_POLL_SECONDS = 0.05


class ChatCompletionsEngine(AIEngine):
    """AI engine over an OpenAI-compatible /chat/completions endpoint."""

    def __init__(
        self,
        base_url: str = AI_ENGINE_BASE_URL,
        model: str = AI_ENGINE_MODEL,
        api_key: str = AI_ENGINE_API_KEY,
        default_timeout: float = ENGINE_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        max_workers: int = 4,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.default_timeout = default_timeout
        self.session = session or requests.Session()
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="flowgen-engine"
        )

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def build_payload(self, request: EngineTaskRequest) -> dict:
        try:
            task = get_task(request.task_type)
        except KeyError as e:
            raise EngineError(str(e)) from e

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": task.system_prompt},
                {"role": "user", "content": task.user_prompt(request.payload)},
            ],
            "temperature": task.temperature,
            "max_tokens": task.max_tokens,
            "user": request.tenant_id,
        }
        if task.json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def _post(self, payload: dict, timeout: float) -> requests.Response:
        response = self.session.post(
            f"{self.base_url}/chat/completions",
            json=payload,
            headers=self._headers(),
            timeout=timeout,
        )
        response.raise_for_status()
        return response

    def _post_until_cancelled(
        self,
        payload: dict,
        timeout: float,
        cancel_event: Optional[threading.Event],
    ) -> requests.Response:
        """
        Without a cancel event the POST runs inline. With one, it runs on the
        worker pool and this thread waits on the event, so a cancel returns
        control right away; the abandoned request finishes in the background.
        """
        if cancel_event is None:
            return self._post(payload, timeout)

        future = self._executor.submit(self._post, payload, timeout)
        while not future.done():
            if cancel_event.wait(CANCEL_POLL_SECONDS):
                future.cancel()
                raise EngineCancelled("Cancelled while waiting for the engine")
        return future.result()

    def execute_task(
        self,
        request: EngineTaskRequest,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        payload = self.build_payload(request)

        if _is_set(cancel_event):
            raise EngineCancelled("Cancelled before the engine call")

        logger.info(
            "Engine task %s for tenant %s (model=%s)",
            request.task_type,
            request.tenant_id,
            self.model,
        )

        try:
            response = self._post_until_cancelled(
                payload, timeout or self.default_timeout, cancel_event
            )
        except requests.Timeout as e:
            if _is_set(cancel_event):
                raise EngineCancelled("Cancelled while waiting for the engine") from e
            raise EngineTimeout(f"Engine call timed out: {e}") from e
        except requests.RequestException as e:
            if _is_set(cancel_event):
                raise EngineCancelled("Cancelled while waiting for the engine") from e
            raise EngineError(f"Engine call failed: {e}") from e

        if _is_set(cancel_event):
            raise EngineCancelled("Cancelled while waiting for the engine")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EngineError("Malformed completion envelope") from e

        data = extract_json(content or "")

        # Undecodable text is handed on as-is; the schema validator rejects it
        return data if data is not None else (content or "").strip()


def _is_set(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()
