"""
common/config.py
----------------
Environment configuration for obsx.

Values come from the process environment or a local `.env` file:
  OBSX_URL        OBS websocket URL (default ws://localhost:4455)
  OBSX_PASSWORD   OBS websocket password (optional)
  OPENAI_API_KEY  required by the `yolo` command only
  OPENAI_MODEL    chat model used by `yolo` (default gpt-4o)
  OBSX_LOG_LEVEL  logging level name (default INFO)
"""

import os
from typing import Optional, Tuple
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_OBS_URL = "ws://localhost:4455"
DEFAULT_OBS_PORT = 4455
DEFAULT_OPENAI_MODEL = "gpt-4o"


class ObsConnectionOptions(BaseModel):
    url: str = DEFAULT_OBS_URL
    password: Optional[str] = None

    def host_port(self) -> Tuple[str, int]:
        """Split the websocket URL into the host/port pair obsws expects."""
        parsed = urlparse(self.url if "://" in self.url else f"ws://{self.url}")
        return parsed.hostname or "localhost", parsed.port or DEFAULT_OBS_PORT


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def get_obs_connection_options() -> ObsConnectionOptions:
    """Read OBSX_URL / OBSX_PASSWORD, treating blank values as unset."""
    return ObsConnectionOptions(
        url=_env("OBSX_URL") or DEFAULT_OBS_URL,
        password=_env("OBSX_PASSWORD"),
    )


def get_openai_api_key() -> Optional[str]:
    return _env("OPENAI_API_KEY")


def get_openai_model() -> str:
    return _env("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL


def get_log_level_name() -> Optional[str]:
    return _env("OBSX_LOG_LEVEL")
