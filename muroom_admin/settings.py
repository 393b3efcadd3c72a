"""
Runtime settings: .env files, environment variables and logging.

Recognised variables:
    MUROOM_API_BASE_URL          API origin (required by the CLI)
    MUROOM_MAX_PARALLEL_UPLOADS  concurrent storage writes (default 4)
    LOG_LEVEL                    fallback level when logging is enabled
"""
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from rich.logging import RichHandler

from .models import ClientConfig

ENV_API_BASE_URL = "MUROOM_API_BASE_URL"
ENV_MAX_PARALLEL_UPLOADS = "MUROOM_MAX_PARALLEL_UPLOADS"
ENV_LOG_LEVEL = "LOG_LEVEL"

SILENT = "silent"


class SettingsError(ValueError):
    """Settings could not be read or are invalid."""


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in "'\"" and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_env_text(text: str) -> Dict[str, str]:
    """Parse ``KEY=value`` lines; comments, blanks and ``export`` prefixes are allowed."""
    values: Dict[str, str] = {}
    for line in (raw.strip() for raw in text.splitlines()):
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[7:].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key:
            values[key] = _unquote(value.strip())
    return values


def load_env_file(path: Path, override: bool = False) -> Dict[str, str]:
    """
    Copy a .env file into ``os.environ``.

    Variables already set in the environment win unless ``override``.
    Returns the values that were applied.

    Raises:
        SettingsError: the file is missing or unreadable
    """
    path = Path(path)
    if not path.is_file():
        raise SettingsError(f"env file not found: {path}")
    try:
        parsed = parse_env_text(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SettingsError(f"could not read env file {path}: {exc}") from exc

    applied = {k: v for k, v in parsed.items() if override or k not in os.environ}
    os.environ.update(applied)
    return applied


def default_env_file() -> Optional[Path]:
    candidate = Path(".env")
    return candidate if candidate.is_file() else None


def config_from_env(api_url: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """
    Build the client configuration from the environment.

    Raises:
        SettingsError: base URL missing or parallelism not a positive integer
    """
    env = os.environ if environ is None else environ
    base_url = api_url or env.get(ENV_API_BASE_URL)
    if not base_url:
        raise SettingsError(f"{ENV_API_BASE_URL} environment variable is not set (or pass --api-url)")

    defaults = ClientConfig()
    raw_parallel = env.get(ENV_MAX_PARALLEL_UPLOADS)
    max_parallel = defaults.max_parallel_uploads
    if raw_parallel:
        try:
            max_parallel = int(raw_parallel)
        except ValueError:
            max_parallel = 0
        if max_parallel < 1:
            raise SettingsError(f"{ENV_MAX_PARALLEL_UPLOADS} must be a positive integer, got {raw_parallel!r}")

    return ClientConfig(api_base_url=base_url.rstrip("/"), max_parallel_uploads=max_parallel)


def configure_logging(debug: bool = False, silent: bool = False, log_level: Optional[str] = None) -> str:
    """
    Route log records to a rich console handler.

    Logging stays off unless ``debug`` or ``log_level`` is given; ``silent``
    wins over both. Returns the effective level name, or ``"silent"``.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if silent or not (debug or log_level):
        logging.disable(logging.CRITICAL)
        root.setLevel(logging.CRITICAL + 1)
        return SILENT

    logging.disable(logging.NOTSET)
    name = "DEBUG" if debug else (log_level or os.getenv(ENV_LOG_LEVEL) or "INFO").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        level = logging.INFO

    handler = RichHandler(rich_tracebacks=True, markup=False, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
    # httpx reports every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    return logging.getLevelName(level)
