import logging

from flowgen.config import LOG_LEVEL

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """
    Install a single stream handler on the package logger.
    Safe to call more than once.
    """
    root = logging.getLogger("flowgen")
    root.setLevel(level.upper())

    if any(getattr(h, "_flowgen", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._flowgen = True
    root.addHandler(handler)
