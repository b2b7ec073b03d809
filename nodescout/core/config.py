"""
Core configuration management for the NodeScout system.

This module handles all configuration loading, validation, and management
including environment variables and settings files.
"""

import logging
import os
from typing import Any, Dict, List, Optional


SCAN_MODES = ("ai", "regex", "deep")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class NodeScoutConfig:
    """Central configuration manager for the NodeScout system."""

    def __init__(self, secrets_file: Optional[str] = None):
        self.secrets_file = secrets_file or os.getenv("NODESCOUT_SECRETS_FILE", "nodescout_secrets.env")
        self._config: Dict[str, Any] = {}
        self._load_default_config()
        self._load_env_file()
        self._load_from_environment()

    def _load_default_config(self):
        """Load default configuration values."""
        runtime_dir = os.path.join(os.path.expanduser("~"), ".nodescout")

        self._config = {
            # AI extraction (Gemini)
            "gemini_api_key": None,
            "gemini_model": "gemini-1.5-flash",
            "advice_model": "gemini-1.5-flash",
            "ai_max_chars": 10000,

            # Extraction
            "scan_mode": "ai",

            # Source fetching
            "sources": [],
            "fetch_timeout": 10,
            "fetch_workers": 8,

            # Reachability probe
            "probe_timeout": 3.0,
            "probe_workers": 16,

            # Paths
            "store_file": os.path.join(runtime_dir, "store.json"),
            "export_file": "nodes_subscribe.txt",
            "log_file": None,
            "log_level": "INFO",
        }

    def _load_env_file(self):
        """Export ``KEY=VALUE`` lines of the secrets file into the environment.

        Variables that are already set keep their value.
        """
        if not self.secrets_file or not os.path.isfile(self.secrets_file):
            return
        try:
            with open(self.secrets_file, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            logging.getLogger(__name__).warning(f"Failed to load env file {self.secrets_file}: {e}")
            return

        for line in lines:
            line = line.strip()
            if line.startswith("export "):
                line = line[len("export "):]
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = (part.strip() for part in line.split("=", 1))
            if key:
                os.environ.setdefault(key, value.strip("\"'"))

    def _load_from_environment(self):
        """Override configuration with environment variables."""
        env_mappings = {
            # Later names win, so the specific one goes last
            "API_KEY": ("gemini_api_key", str),
            "GEMINI_API_KEY": ("gemini_api_key", str),
            "NODESCOUT_API_KEY": ("gemini_api_key", str),
            "NODESCOUT_GEMINI_MODEL": ("gemini_model", str),
            "NODESCOUT_ADVICE_MODEL": ("advice_model", str),
            "NODESCOUT_AI_MAX_CHARS": ("ai_max_chars", int),
            "NODESCOUT_SCAN_MODE": ("scan_mode", lambda x: x.strip().lower()),
            "NODESCOUT_SOURCES": ("sources", _parse_list),
            "NODESCOUT_FETCH_TIMEOUT": ("fetch_timeout", int),
            "NODESCOUT_FETCH_WORKERS": ("fetch_workers", int),
            "NODESCOUT_PROBE_TIMEOUT": ("probe_timeout", float),
            "NODESCOUT_PROBE_WORKERS": ("probe_workers", int),
            "NODESCOUT_STORE_FILE": ("store_file", str),
            "NODESCOUT_EXPORT_FILE": ("export_file", str),
            "NODESCOUT_LOG_FILE": ("log_file", str),
            "NODESCOUT_LOG_LEVEL": ("log_level", lambda x: x.strip().upper()),
            "NODESCOUT_DEBUG": ("log_level", lambda x: "DEBUG" if _parse_bool(x) else "INFO"),
        }

        for env_key, (config_key, converter) in env_mappings.items():
            if env_key in os.environ:
                try:
                    self._config[config_key] = converter(os.environ[env_key])
                except (ValueError, TypeError):
                    logging.getLogger(__name__).warning(
                        f"Invalid value for {env_key}: {os.environ[env_key]}"
                    )

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value."""
        self._config[key] = value

    def update(self, config_dict: Dict[str, Any]):
        """Update multiple configuration values."""
        self._config.update(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Get configuration as dictionary."""
        return self._config.copy()

    @property
    def ai_enabled(self) -> bool:
        return bool(self.get("gemini_api_key"))

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.ai_enabled:
            logging.getLogger(__name__).info(
                "Configuration warning (non-critical): NODESCOUT_API_KEY not set - AI extraction disabled"
            )

        if self.get("scan_mode") not in SCAN_MODES:
            errors.append(f"scan_mode must be one of {', '.join(SCAN_MODES)}")

        numeric_fields = [
            ("ai_max_chars", 1000, 100000),
            ("fetch_timeout", 1, 120),
            ("fetch_workers", 1, 64),
            ("probe_workers", 1, 256),
        ]

        for field, min_val, max_val in numeric_fields:
            value = self.get(field)
            if not isinstance(value, int) or value < min_val or value > max_val:
                errors.append(f"{field} must be between {min_val} and {max_val}")

        probe_timeout = self.get("probe_timeout")
        if not isinstance(probe_timeout, (int, float)) or not 0 < probe_timeout <= 60:
            errors.append("probe_timeout must be between 0 and 60 seconds")

        return errors
