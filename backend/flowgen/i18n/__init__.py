from flowgen.i18n.messages import DEFAULT_LOCALE, MESSAGES, render

__all__ = ["DEFAULT_LOCALE", "MESSAGES", "render"]
