from flowgen.config import AI_ENGINE_API_KEY, AI_ENGINE_BASE_URL, AI_ENGINE_MODEL
from .engine_client import ChatCompletionsEngine


def get_ai_engine():
    return ChatCompletionsEngine(
        base_url=AI_ENGINE_BASE_URL,
        model=AI_ENGINE_MODEL,
        api_key=AI_ENGINE_API_KEY,
    )
