"""
Runtime configuration.

Values come from environment variables, optionally loaded from a .env file.
Settings are read once and passed explicitly to the client and transports.
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://world.openfoodfacts.org"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "openfoodfacts-mcp/1.0.0"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_settings(environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    """
    Build Settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ (tests)
        dotenv: Load a .env file into os.environ first
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    return Settings(
        base_url=environ.get("OFF_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        timeout=float(environ.get("OFF_TIMEOUT", DEFAULT_TIMEOUT)),
        user_agent=environ.get("OFF_USER_AGENT", DEFAULT_USER_AGENT),
        host=environ.get("MCP_HOST", DEFAULT_HOST),
        port=int(environ.get("MCP_PORT", DEFAULT_PORT)),
        log_level=environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL, stream=None) -> None:
    """Configure root logging once, at the entry point."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=stream)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
