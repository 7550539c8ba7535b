import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

# Event keys whose values are credentials and must not reach log output
SENSITIVE_KEYS = frozenset({"jwt", "token", "password", "password_hash"})
REDACTED = "***"


def redact_credentials(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Mask credential values in an event, including inside logged user documents."""
    for key, value in event_dict.items():
        if key in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {k: REDACTED if k in SENSITIVE_KEYS else v for k, v in value.items()}
    return event_dict


def setup_logging(debug: bool) -> None:
    """Configure structlog on top of stdlib logging.

    Console output in debug mode, one JSON object per line otherwise.
    Context bound with structlog.contextvars (e.g. a request id from the
    calling service) is merged into every account store event.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
    )

    # Server selection and command monitoring are noisy at INFO
    for name in ("pymongo", "pymongo.topology", "pymongo.connection", "pymongo.command"):
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_credentials,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    processors.append(structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
