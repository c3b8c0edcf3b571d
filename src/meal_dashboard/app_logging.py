"""Logging configuration helpers."""

import logging


class _SessionFilter(logging.Filter):
    """Give every record a session_id so the formatter can always render it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id") or record.session_id is None:
            record.session_id = "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("meal_dashboard")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.addFilter(_SessionFilter())
    handler.setFormatter(
        logging.Formatter("%(levelname)s: %(name)s: [%(session_id)s] %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
