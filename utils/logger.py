# utils/logger.py
"""
Logger factory for the exchange client.

Every handler it installs carries a ``SecretRedactingFilter``: order URLs and
error texts can contain ``signature=<hex>`` and, in a misconfigured setup,
the API key or secret itself.  Those are replaced with ``***`` before a
record reaches the console or the rotating file.
"""
import logging
import os
import re
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional, Union

_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_LOG_FILE = os.getenv("LOG_FILE", "logs/exchange_client.log")
_ROTATE_BYTES = int(os.getenv("LOG_MAX_MB", "5")) * 1024 * 1024
_ROTATE_KEEP = int(os.getenv("LOG_BACKUPS", "5"))

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

MASK = "***"
_SIGNATURE_RE = re.compile(r"(signature=)[0-9a-fA-F]+")

# client libraries log full request URLs at DEBUG
_QUIET_LIBRARIES = ("websockets", "urllib3", "asyncio")


class SecretRedactingFilter(logging.Filter):
    """Masks query signatures and any registered secret value in a record."""

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self._secrets = set()
        for secret in secrets:
            self.add_secret(secret)

    def add_secret(self, secret: Optional[str]) -> None:
        if secret:
            self._secrets.add(secret)

    def redact(self, text: str) -> str:
        text = _SIGNATURE_RE.sub(r"\g<1>" + MASK, text)
        # longest first, so a secret containing another one is masked whole
        for secret in sorted(self._secrets, key=len, reverse=True):
            text = text.replace(secret, MASK)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg, record.args = redacted, None
        return True


def _find_filter(logger: logging.Logger) -> Optional[SecretRedactingFilter]:
    for handler in logger.handlers:
        for f in handler.filters:
            if isinstance(f, SecretRedactingFilter):
                return f
    return None


def setup_logger(name: str,
                 level: Union[str, int] = _LEVEL,
                 log_file: Optional[str] = _LOG_FILE,
                 to_console: bool = True,
                 secrets: Iterable[str] = ()) -> logging.Logger:
    """
    Create/get a redacting logger with console and rotating-file handlers.

    Calling it again with the same name returns the configured logger and only
    registers the extra ``secrets``.  ``log_file=None`` skips the file.
    """
    logger = logging.getLogger(name)
    existing = _find_filter(logger)
    if existing is not None:
        for secret in secrets:
            existing.add_secret(secret)
        return logger

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    redactor = SecretRedactingFilter(secrets)
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    handlers = []

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_file, maxBytes=_ROTATE_BYTES, backupCount=_ROTATE_KEEP, encoding="utf-8"
        ))
    if to_console:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        handler.addFilter(redactor)
        logger.addHandler(handler)

    for library in _QUIET_LIBRARIES:
        logging.getLogger(library).setLevel(logging.WARNING)

    return logger
