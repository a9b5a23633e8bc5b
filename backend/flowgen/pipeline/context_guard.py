"""
Context Guard - screens the raw user prompt before anything leaves the process.

Checks, in this order:
1. Sanitization (trim, collapse whitespace, hard cap)
2. Length policy
3. Security screen (injection, code generation, secrets probing, chit-chat)
4. Topic relevance (curated automation vocabulary)

Only a verdict and the sanitized prompt come out of here. The pattern that
blocked a prompt is logged, never returned.
"""

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import yaml

from flowgen.config import LOCALE, TOPIC_TERMS_FILE
from flowgen.i18n import render

logger = logging.getLogger(__name__)


HARD_MAX_CHARS = 1000
MIN_PROMPT_CHARS = 10
MAX_PROMPT_CHARS = 800


class GuardRejection(Enum):
    TOO_SHORT = "too_short"
    BLOCKED = "blocked"
    OFF_TOPIC = "off_topic"


@dataclass(frozen=True)
class GuardResult:
    valid: bool
    reason: Optional[str] = None
    rejection: Optional[GuardRejection] = None
    sanitized_prompt: Optional[str] = None


class ContextGuard:
    """
    Usage:
        guard = ContextGuard()
        result = guard.validate(prompt)
        if not result.valid:
            return result.reason
    """

    BLOCKED_PATTERNS: Dict[str, List[str]] = {
        "prompt_injection": [
            r"ignore\s+(all\s+)?(the\s+)?(previous|prior|above|earlier)\s+(instructions|rules|prompts?)",
            r"disregard\s+(all\s+)?(the\s+)?(previous|prior|above)",
            r"forget\s+(all\s+)?(your|the|previous|prior)\s+(instructions|rules)",
            r"ignora\s+(todas\s+)?(las\s+)?(instrucciones|reglas)",
            r"olvida\s+(todas\s+)?(las\s+)?(tus\s+)?(instrucciones|reglas)",
            r"system\s+prompt",
            r"prompt\s+(del|de)\s+sistema",
            r"you\s+are\s+now\b",
            r"ahora\s+eres\b",
            r"\bact\s+as\b",
            r"\bact[uú]a\s+como\b",
            r"\bjailbreak",
            r"developer\s+mode",
            r"modo\s+desarrollador",
        ],
        "code_generation": [
            r"\b(write|generate|create|give\s+me)\s+(me\s+)?(the\s+|a\s+|some\s+)?(source\s+)?code\b",
            r"\b(escribe|escr[ií]beme|genera|gen[eé]rame|crea|dame)\s+(un\s+|el\s+)?(c[oó]digo|script|programa)\b",
            r"\bc[oó]digo\s+fuente\b",
            r"\bsource\s+code\b",
            r"\b(python|javascript|typescript|php|java|c\+\+)\s+(code|script|c[oó]digo)\b",
        ],
        "security_probe": [
            r"\b(passwords?|contrase[ñn]as?|credentials?|credenciales)\b",
            r"\b(api[\s_-]?keys?|secret[\s_-]?keys?|access[\s_-]?tokens?|private[\s_-]?keys?)\b",
            r"\b(exploits?|hack|hackear|hacking|malware|phishing|ransomware)\b",
            r"sql\s+injection|inyecci[oó]n\s+(sql|de\s+c[oó]digo)",
            r"\b(environment\s+variables|variables\s+de\s+entorno)\b",
        ],
        "off_topic": [
            r"\b(chistes?|jokes?)\b",
            r"\b(poemas?|poems?|poes[ií]a|poetry)\b",
            r"\b(cu[eé]ntame|tell\s+me)\s+(un|una|a|an)\s+(historia|cuento|story)\b",
            r"\b(qu[eé]\s+opinas|tu\s+opini[oó]n|what\s+do\s+you\s+think|your\s+opinion)\b",
            r"\b(homework|deberes)\b",
            r"\bay[uú]dame\s+con\s+mi\s+tarea\b",
            r"\btarea\s+(escolar|de\s+(matem[aá]ticas|historia|clase|la\s+escuela))\b",
        ],
    }

    TOPIC_TERMS: List[str] = [
        # automation
        "automatiza", "automation", "automate", "workflow", "flujo", "flow",
        "bot", "trigger", "disparador", "proceso", "process",
        # messaging channels
        "mensaje", "message", "whatsapp", "instagram", "messenger", "telegram",
        "email", "correo", "sms", "notific", "respond", "reply", "enviar", "send",
        "escrib", "write", "saludo", "bienvenida", "welcome", "boton", "botón", "button",
        # crm / leads
        "lead", "cliente", "customer", "client", "contacto", "contact", "crm",
        "etiqueta", "tag", "etapa", "stage", "pipeline", "venta", "sales",
        "prospecto", "oportunidad",
        # control flow
        "cuando", "when", "si ", "if ", "condici", "condition", "entonces", "then",
        "después", "despues", "after", "else", "sino",
        # scheduling
        "esperar", "espera", "wait", "horario", "schedule", "hours", "minutos",
        "minutes", "días", "dias", "days", "recordatorio", "reminder", "cita",
        "appointment",
        # billing / integrations
        "factura", "invoice", "cotizaci", "quote", "pago", "payment", "webhook",
        "integraci", "http", "variable", "a/b", "ab test",
    ]

    def __init__(
        self,
        locale: str = LOCALE,
        extra_topic_terms: Optional[List[str]] = None,
        topic_terms_file: Optional[str] = TOPIC_TERMS_FILE,
    ):
        self.locale = locale
        self.topic_terms = [t.lower() for t in self.TOPIC_TERMS]
        self.topic_terms.extend(t.lower() for t in (extra_topic_terms or []))
        if topic_terms_file:
            self.topic_terms.extend(self._load_topic_terms(topic_terms_file))

        self._compiled = [
            (category, pattern, re.compile(pattern, re.IGNORECASE))
            for category, patterns in self.BLOCKED_PATTERNS.items()
            for pattern in patterns
        ]

    def _load_topic_terms(self, path: str) -> List[str]:
        """Extra allowlist terms from a YAML file: ``terms: [..]``."""
        if not os.path.exists(path):
            logger.warning("Topic terms file not found: %s", path)
            return []

        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        terms = [str(t).lower() for t in config.get("terms", []) if str(t).strip()]
        logger.info("Loaded %d extra topic terms from %s", len(terms), path)
        return terms

    # ----------------------------
    # Steps
    # ----------------------------

    @staticmethod
    def sanitize(prompt: str) -> str:
        collapsed = re.sub(r"\s+", " ", (prompt or "").strip())
        return collapsed[:HARD_MAX_CHARS]

    def find_blocked_pattern(self, text: str) -> Optional[tuple[str, str]]:
        for category, pattern, compiled in self._compiled:
            if compiled.search(text):
                return category, pattern
        return None

    def is_on_topic(self, text: str) -> bool:
        lowered = text.lower()
        return any(term in lowered for term in self.topic_terms)

    # ----------------------------
    # Main
    # ----------------------------

    def validate(self, prompt: str) -> GuardResult:
        sanitized = self.sanitize(prompt)

        if len(sanitized) < MIN_PROMPT_CHARS:
            return self._reject(GuardRejection.TOO_SHORT)

        if len(sanitized) > MAX_PROMPT_CHARS:
            logger.info(
                "Prompt truncated from %d to %d characters",
                len(sanitized),
                MAX_PROMPT_CHARS,
            )
            sanitized = sanitized[:MAX_PROMPT_CHARS]

        blocked = self.find_blocked_pattern(sanitized)
        if blocked:
            category, pattern = blocked
            logger.warning(
                "Prompt rejected by security screen (category=%s, pattern=%r)",
                category,
                pattern,
            )
            return self._reject(GuardRejection.BLOCKED)

        if not self.is_on_topic(sanitized):
            logger.info("Prompt rejected as off-topic")
            return self._reject(GuardRejection.OFF_TOPIC)

        return GuardResult(valid=True, sanitized_prompt=sanitized)

    def _reject(self, rejection: GuardRejection) -> GuardResult:
        return GuardResult(
            valid=False,
            reason=render(f"guard.{rejection.value}", self.locale),
            rejection=rejection,
        )