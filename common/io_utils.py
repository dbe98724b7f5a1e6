"""
common/io_utils.py
------------------
General-purpose logging and filesystem helpers used across
obsx modules (scene, webcam, assistant).
"""

import os
import json
import logging
from typing import Any, Optional


# -------------------------------------------------------
# Logging utilities
# -------------------------------------------------------

def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> None:
    """Configure logging with optional file output"""
    format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(),
            *([] if not log_file else [logging.FileHandler(log_file)])
        ]
    )
    # websocket and HTTP client libraries log every frame/request at INFO
    for noisy in ("obswebsocket", "websocket", "httpx"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


def log(message: str, level: str = "INFO") -> None:
    """Unified logging with emoji support"""
    logger = logging.getLogger("obsx")
    level_map = {
        "INFO": logging.INFO,
        "ERROR": logging.ERROR,
        "WARNING": logging.WARNING,
        "DEBUG": logging.DEBUG,
        "OK": logging.INFO
    }
    logger.log(level_map.get(level, logging.INFO), message)


def level_from_name(name: Optional[str], default: int = logging.INFO) -> int:
    """Map a level name such as 'debug' to its logging constant."""
    if not name:
        return default
    value = logging.getLevelName(name.strip().upper())
    return value if isinstance(value, int) else default


def to_json(data: Any) -> str:
    """Compact JSON for log lines and LLM feedback."""
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


# -------------------------------------------------------
# Path helpers
# -------------------------------------------------------

def expand_home(p: str) -> str:
    """Expand a leading '~/' only; '~user' forms are left alone."""
    if not p.startswith("~/"):
        return p
    return os.path.join(os.path.expanduser("~"), p[2:])


def normalize_file_path(p: str) -> str:
    """Absolute, symlink-resolved path so OBS settings and disk paths compare equal."""
    resolved = os.path.abspath(expand_home(p))
    try:
        return os.path.realpath(resolved)
    except OSError:
        return resolved
