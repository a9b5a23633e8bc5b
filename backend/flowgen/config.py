import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# AI engine (OpenAI-compatible chat completions endpoint)
AI_ENGINE_BASE_URL = os.getenv("AI_ENGINE_BASE_URL", "http://host.docker.internal:11434/v1")
AI_ENGINE_MODEL = os.getenv("AI_ENGINE_MODEL", "mistral:7b-instruct")
AI_ENGINE_API_KEY = os.getenv("AI_ENGINE_API_KEY", "")
ENGINE_TIMEOUT_SECONDS = float(os.getenv("FLOWGEN_ENGINE_TIMEOUT", "60"))

# Generation quota per tenant
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("FLOWGEN_RATE_LIMIT_MAX", "10"))
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("FLOWGEN_RATE_LIMIT_WINDOW", "3600"))

LOCALE = os.getenv("FLOWGEN_LOCALE", "es")
STRICT_REACHABILITY = _flag("FLOWGEN_STRICT_REACHABILITY")
TOPIC_TERMS_FILE = os.getenv("FLOWGEN_TOPIC_TERMS_FILE")

LOG_LEVEL = os.getenv("FLOWGEN_LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FLOWGEN_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
