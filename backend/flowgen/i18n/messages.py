"""
User-facing text, kept apart from the pipeline.

Stages report language-neutral codes (error kinds, guard rejections, graph
violation codes); this module is the only place they become sentences.
Spanish is the product language and the fallback for unknown locales.
"""

from typing import Dict

DEFAULT_LOCALE = "es"

MESSAGES: Dict[str, Dict[str, str]] = {
    "es": {
        # ---- orchestrator ----
        "rate_limit_exceeded": (
            "Has alcanzado el límite de generaciones. "
            "Intenta de nuevo en {minutes} minutos."
        ),
        "generation_schema_invalid": (
            "La IA generó una respuesta inválida. "
            "Intenta reformular tu descripción de forma más clara."
        ),
        "generation_reported_failure": "No se pudo generar el workflow.",
        "unexpected_error": "Error al procesar tu solicitud. Intenta de nuevo.",
        "cancelled": "La generación fue cancelada.",
        # ---- context guard ----
        "guard.too_short": (
            "La descripción es demasiado corta. "
            "Describe con más detalle la automatización que necesitas."
        ),
        "guard.blocked": (
            "No puedo procesar esta solicitud. "
            "Describe una automatización de negocio, por ejemplo: "
            "'Cuando un cliente escriba, enviar un mensaje de bienvenida'."
        ),
        "guard.off_topic": (
            "Solo puedo generar workflows de automatización. "
            "Describe qué debe pasar, cuándo y por qué canal."
        ),
        # ---- graph logic ----
        "graph.missing_trigger": "El flujo debe comenzar con un nodo Trigger",
        "graph.multiple_triggers": "Solo puede haber un Trigger por flujo",
        "graph.unknown_edge_source": "Conexión inválida: origen '{subject}' no existe",
        "graph.unknown_edge_target": "Conexión inválida: destino '{subject}' no existe",
        "graph.disconnected_node": "Nodo '{subject}' no está conectado al flujo",
        "graph.unreachable_node": "Nodo '{subject}' no es alcanzable desde el Trigger",
    },
    "en": {
        "rate_limit_exceeded": (
            "You have reached the generation limit. "
            "Try again in {minutes} minutes."
        ),
        "generation_schema_invalid": (
            "The AI produced an invalid response. "
            "Try rephrasing your description more clearly."
        ),
        "generation_reported_failure": "The workflow could not be generated.",
        "unexpected_error": "Something went wrong processing your request. Please try again.",
        "cancelled": "The generation was cancelled.",
        "guard.too_short": (
            "The description is too short. "
            "Describe the automation you need in more detail."
        ),
        "guard.blocked": (
            "I can't process this request. "
            "Describe a business automation, for example: "
            "'When a customer writes, send a welcome message'."
        ),
        "guard.off_topic": (
            "I can only generate automation workflows. "
            "Describe what should happen, when, and on which channel."
        ),
        "graph.missing_trigger": "The workflow must start with a Trigger node",
        "graph.multiple_triggers": "Only one Trigger is allowed per workflow",
        "graph.unknown_edge_source": "Invalid connection: source '{subject}' does not exist",
        "graph.unknown_edge_target": "Invalid connection: target '{subject}' does not exist",
        "graph.disconnected_node": "Node '{subject}' is not connected to the workflow",
        "graph.unreachable_node": "Node '{subject}' is not reachable from the Trigger",
    },
}


def render(key: str, locale: str = DEFAULT_LOCALE, **params) -> str:
    catalog = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    template = catalog.get(key) or MESSAGES[DEFAULT_LOCALE][key]
    return template.format(**params)
