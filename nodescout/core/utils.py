"""
Core utilities and helper functions.

This module contains common utility functions used throughout
the NodeScout system.
"""

import base64
import json
import logging
import random
import sys
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from colorama import Fore, Style, init


BROWSER_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:122.0) Gecko/20100101 Firefox/122.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
]


def random_user_agent() -> str:
    """Get a random browser user agent."""
    return random.choice(BROWSER_USER_AGENTS)


def safe_b64decode(data: str) -> bytes:
    """Decode standard or URL-safe base64, adding any missing padding.

    Raises ``binascii.Error`` (a ``ValueError``) on characters outside the
    alphabet or on an impossible length.
    """
    normalized = data.replace("-", "+").replace("_", "/")
    padded = normalized + "=" * (-len(normalized) % 4)
    return base64.b64decode(padded, validate=True)


def bytes_to_text(data: bytes) -> str:
    """Interpret decoded bytes as UTF-8, falling back to Latin-1."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def new_id() -> str:
    """Fresh opaque identifier, never reused."""
    return str(uuid.uuid4())


def now_label() -> str:
    """Wall-clock time label used on scan log entries."""
    return datetime.now().strftime("%H:%M:%S")


def dumps_json(data: Any) -> bytes:
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def loads_json(raw: Optional[bytes], default: Any) -> Any:
    """Parse JSON bytes, returning ``default`` when missing or malformed."""
    if not raw:
        return default
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return default


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
    DATEFMT = "%Y-%m-%d %H:%M:%S"
    COLORS: Dict[int, str] = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record):
        color = self.COLORS.get(record.levelno, "")
        formatter = logging.Formatter(color + self.FORMAT + Style.RESET_ALL, datefmt=self.DATEFMT)
        return formatter.format(record)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None):
    """Setup colored logging for the application."""
    init(autoreset=True)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter())

    handlers = [console_handler]
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8", mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # Reduce noise from external libraries
    logging.getLogger("urllib3.connectionpool").setLevel(logging.ERROR)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
