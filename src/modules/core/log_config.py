"""structlog and stdlib logging setup.

Both pipelines share one processor chain, so Django's own log lines and
``structlog.get_logger`` lines come out as the same JSON shape, carrying
the request ``correlation_id`` bound by ``CorrelationIdMiddleware``.
Imported by ``config.settings`` before Django is set up, so nothing here
may touch the ORM or app registry.
"""

import re

import structlog

MASK = "***MASKED***"

SENSITIVE_KEYS = frozenset(
    {"password", "passwd", "secret", "token", "access", "refresh", "authorization"}
)

SENSITIVE_PATTERN = re.compile(
    r"(password|passwd|secret|token|authorization|api_key)"
    r"""([=:]\s*["']?)([^\s,}"']+)""",
    re.IGNORECASE,
)


def _mask(value):
    if isinstance(value, str):
        return SENSITIVE_PATTERN.sub(MASK, value)
    if isinstance(value, dict):
        return {
            key: MASK if str(key).lower() in SENSITIVE_KEYS else _mask(item)
            for key, item in value.items()
        }
    return value


def mask_sensitive_data(_, __, event_dict):
    """Processor that masks passwords, secrets and tokens in log values.

    Values under a sensitive key are replaced wholesale; other strings are
    scanned for ``key=value`` style leaks, one dict level at a time.
    """
    for key, value in list(event_dict.items()):
        if key in SENSITIVE_KEYS:
            event_dict[key] = MASK
        else:
            event_dict[key] = _mask(value)
    return event_dict


SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    mask_sensitive_data,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def configure_structlog() -> None:
    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_logging_config(level: str = "INFO") -> dict:
    """Django ``LOGGING`` dict rendering every record as one JSON line."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.JSONRenderer(),
                ],
                "foreign_pre_chain": SHARED_PROCESSORS,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
        "loggers": {
            "django": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            "django.server": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }
