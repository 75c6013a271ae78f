"""
Logging setup for the mini app.

Loggers are named by ``LogCategory``; context passed to the ``log_*``
helpers is rendered as ``key=value`` pairs after masking anything that
could carry the app secret or a launch signature.
"""
import logging
import logging.handlers
from enum import Enum
from pathlib import Path


class LogCategory(str, Enum):
    """Logger names used across the app."""
    APP = "app"
    REQUEST = "app.request"
    ERRORS = "app.errors"
    SECURITY = "app.security"
    TONPLACE = "app.tonplace"


DEFAULT_LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "app.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

MASK = '***MASKED***'

# Substrings of context keys whose values are never logged
SENSITIVE_FIELDS = {
    'secret',
    'hash',
    'signature',
    'token',
    'authorization',
    'api_key',
    'apikey',
}

# A hex HMAC-SHA256 digest is 64 characters
_SIGNATURE_LIKE_LENGTH = 64


def _is_sensitive_key(key) -> bool:
    key_lower = str(key).lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS)


def _looks_like_signature(value: str) -> bool:
    return len(value) >= _SIGNATURE_LIKE_LENGTH and all(c.isalnum() or c in '-_' for c in value)


def _sanitize_data(data):
    """
    Mask sensitive values before they reach a log line.

    Dict values under a sensitive key are replaced, lists and dicts are
    walked recursively, and bare strings shaped like a signature are masked
    wherever they appear.
    """
    if isinstance(data, dict):
        return {
            key: MASK if _is_sensitive_key(key) else _sanitize_data(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [_sanitize_data(item) for item in data]
    if isinstance(data, str) and _looks_like_signature(data):
        return MASK
    return data


def _resolve_log_level(level_value, default=DEFAULT_LOG_LEVEL):
    """
    Turn a LOG_LEVEL setting into a logging level.

    Returns ``(level, used_default)``; names are case-insensitive and
    numeric strings are accepted.
    """
    if isinstance(level_value, str):
        candidate = level_value.strip().upper()
        if not candidate:
            return default, True
        level_value = int(candidate) if candidate.isdigit() else candidate
    try:
        return logging._checkLevel(level_value), False
    except (ValueError, TypeError):
        return default, True


def _get_settings():
    """Lazy import; config logs through this module."""
    from app.core.config import settings
    return settings


def _build_handlers(level: int, log_dir) -> list:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler()
    handlers = [console_handler]

    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                directory / LOG_FILE_NAME,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding='utf-8',
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    return handlers


def setup_logging():
    """Configure the root logger from settings; safe to call more than once."""
    settings = _get_settings()
    level, used_default_level = _resolve_log_level(settings.log_level)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(level, settings.log_dir):
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for category in (LogCategory.APP, LogCategory.REQUEST, LogCategory.TONPLACE):
        logging.getLogger(category).setLevel(level)
    # Rejected launches are always recorded
    logging.getLogger(LogCategory.SECURITY).setLevel(min(level, logging.WARNING))

    for noisy in ("uvicorn.access", "uvicorn.error", "fastapi", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    if used_default_level:
        logger.warning(
            "Invalid log level '%s' in configuration, falling back to %s",
            settings.log_level,
            logging.getLevelName(level),
        )
    logger.info(
        "Logging configured - Level: %s, file logging: %s",
        logging.getLevelName(level),
        Path(settings.log_dir) / LOG_FILE_NAME if settings.log_dir else "disabled",
    )


def _log_with_context(logger: logging.Logger, level: int, message: str, request_id: str = None, exc_info=False, **kwargs):
    """Prefix the request ID and append sanitized ``key=value`` context."""
    if request_id:
        message = f"[{request_id}] {message}"
    if kwargs:
        context = ", ".join(f"{k}={v}" for k, v in _sanitize_data(kwargs).items())
        message = f"{message} ({context})"
    logger.log(level, message, exc_info=exc_info)


def log_security_event(message: str, request_id: str = None, **kwargs):
    """Log authentication outcomes. Never pass the app secret here."""
    _log_with_context(logging.getLogger(LogCategory.SECURITY), logging.WARNING, message, request_id, **kwargs)


def log_info(message: str, request_id: str = None, **kwargs):
    _log_with_context(logging.getLogger(LogCategory.APP), logging.INFO, message, request_id, **kwargs)


def log_debug(message: str, request_id: str = None, **kwargs):
    _log_with_context(logging.getLogger(LogCategory.APP), logging.DEBUG, message, request_id, **kwargs)


def log_warning(message: str, request_id: str = None, **kwargs):
    _log_with_context(logging.getLogger(LogCategory.APP), logging.WARNING, message, request_id, **kwargs)


def log_error(error: Exception | str, request_id: str = None, **kwargs):
    """Log an error on the errors logger.

    Args:
        error: Exception object or error message string
        request_id: Optional request ID for context
        **kwargs: Additional context (e.g., user_id, path)
    """
    # Tracebacks only for real exceptions
    _log_with_context(
        logging.getLogger(LogCategory.ERRORS),
        logging.ERROR,
        f"Error: {error}",
        request_id,
        exc_info=error if isinstance(error, Exception) else False,
        **kwargs,
    )
