"""
Schema Validator - the single trust boundary for engine output.

Everything downstream works on the typed ``OrchestratorResponse``; nothing
re-reads raw engine fields. Validation is all-or-nothing.
"""

import logging
from typing import Any, List

from pydantic import ValidationError

from flowgen.ir.validation import ValidationResult
from flowgen.ir.workflow import OrchestratorResponse
from flowgen.utils.json_extract import extract_json

logger = logging.getLogger(__name__)


def _format_errors(exc: ValidationError) -> List[str]:
    errors = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        errors.append(f"{loc}: {err.get('msg', 'invalid')}")
    return errors


def parse_orchestrator_response(raw: Any) -> ValidationResult:
    """
    Returns:
        ValidationResult.success(OrchestratorResponse) or
        ValidationResult.failure([...diagnostics...])
    """
    data = raw
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        data = extract_json(text)
        if data is None:
            return ValidationResult.failure(["<root>: response is not valid JSON"])

    if not isinstance(data, dict):
        return ValidationResult.failure(
            [f"<root>: expected a JSON object, got {type(data).__name__}"]
        )

    try:
        response = OrchestratorResponse.model_validate(data)
    except ValidationError as e:
        errors = _format_errors(e)
        logger.debug("Engine response failed schema validation: %s", errors)
        return ValidationResult.failure(errors)

    return ValidationResult.success(response)
