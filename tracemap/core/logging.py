"""
structlog configuration for TraceMap.

    from tracemap.core.logging import get_logger
    logger = get_logger(__name__)
    logger.info("analysis_completed", endpoint="/analyze-email", risk_level="HIGH")

Identifiers go through mask_email() before they reach a log call.
"""

import logging
import sys
from pathlib import Path

import structlog
from structlog.types import Processor

AUDIT_LOGGER_NAME = "tracemap.audit"

# HTTP and SDK clients used for explanation calls
_QUIET_LIBRARIES = ("aiohttp", "httpx", "httpcore", "openai", "anthropic")


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _attach_file_handlers(log_dir: Path, level: int) -> None:
    """tracemap.log gets everything at `level`; audit.log only the audit trail."""
    log_dir.mkdir(parents=True, exist_ok=True)

    app_handler = logging.FileHandler(log_dir / "tracemap.log")
    app_handler.setLevel(level)
    logging.getLogger().addHandler(app_handler)

    audit_handler = logging.FileHandler(log_dir / "audit.log")
    audit_handler.setLevel(logging.INFO)
    logging.getLogger(AUDIT_LOGGER_NAME).addHandler(audit_handler)


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    log_dir: Path | None = None,
) -> None:
    """
    Configure structlog on top of stdlib logging.

    Called once at startup, from the API lifespan or the CLI callback.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        log_format: "json" for log shipping, anything else for console output.
        log_dir: Optional directory for tracemap.log and audit.log.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_dir:
        _attach_file_handlers(Path(log_dir), level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def get_audit_logger() -> structlog.stdlib.BoundLogger:
    """Logger for the audit trail: endpoint, masked identifier, resulting level."""
    return structlog.stdlib.get_logger(AUDIT_LOGGER_NAME)
