import logging
import os
from typing import Mapping, NamedTuple, Optional

from rich.console import Console
from rich.logging import RichHandler

from .domain.errors import InvalidInputError

ENV_PREFIX = "GITEA_RESOURCE_"
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_LOG_LEVEL = "WARNING"


class Settings(NamedTuple):
    log_level: str = DEFAULT_LOG_LEVEL
    chunk_size: int = DEFAULT_CHUNK_SIZE
    # None keeps the httpx default
    timeout: Optional[float] = None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """read process-level settings from GITEA_RESOURCE_* environment variables."""
    if environ is None:
        environ = os.environ

    log_level = environ.get(f"{ENV_PREFIX}LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise InvalidInputError(f"Invalid log level '{log_level}'")

    raw_chunk_size = environ.get(f"{ENV_PREFIX}CHUNK_SIZE")
    chunk_size = DEFAULT_CHUNK_SIZE
    if raw_chunk_size:
        try:
            chunk_size = int(raw_chunk_size)
        except ValueError as e:
            raise InvalidInputError(f"Invalid chunk size '{raw_chunk_size}'", cause=e) from e
        if chunk_size <= 0:
            raise InvalidInputError(f"Chunk size must be positive, got {chunk_size}")

    raw_timeout = environ.get(f"{ENV_PREFIX}TIMEOUT")
    timeout = None
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise InvalidInputError(f"Invalid timeout '{raw_timeout}'", cause=e) from e
        if timeout <= 0:
            raise InvalidInputError(f"Timeout must be positive, got {timeout}")

    return Settings(log_level=log_level, chunk_size=chunk_size, timeout=timeout)


def configure_logging(level: str, console: Optional[Console] = None):
    """send log records to stderr through rich; stdout is reserved for results."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    # the Authorization header must never reach the log
    logging.getLogger("httpx").setLevel(max(logging.getLevelName(level), logging.WARNING))
    logging.getLogger("httpcore").setLevel(logging.WARNING)
