import json
import re
from typing import Any


def strip_markdown_fences(text: str) -> str:
    content = re.sub(r"^```(?:json)?\s*", "", text.strip())
    return re.sub(r"\s*```$", "", content.strip())


def extract_json(text: str) -> Any:
    """
    Decode the JSON value in LLM output.

    Strategy:
    1. Strip markdown fences and try json.loads
    2. Fall back to the outermost {...} block
    3. None if nothing decodes
    """
    if not isinstance(text, str) or not text.strip():
        return None

    cleaned = strip_markdown_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    match = re.search(r"\{.*\}", cleaned, re.DOTALL)
    if not match:
        return None

    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
