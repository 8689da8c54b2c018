"""
Configuration loader for export profiles.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..core.errors import ConfigError
from ..core.models import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SCROLL_TIMEOUT,
    ConnectionSpec,
    ExportSpec,
)


logger = logging.getLogger(__name__)

PASSWORD_ENV = "SEARCH_EXPORT_PASSWORD"
OUTPUT_DIR_ENV = "SEARCH_EXPORT_OUTPUT_DIR"


def default_profile() -> Dict[str, Any]:
    """Return a profile pointing at a local, unsecured search service."""
    return {
        "connection": {
            "endpoint": "http://localhost:9200",
            "index": "",
            "username": "",
            "ignore_tls_errors": False,
        },
        "export": {
            "format": "csv",
            "fields": [],
            "batch_size": DEFAULT_BATCH_SIZE,
            "scroll_timeout": DEFAULT_SCROLL_TIMEOUT,
            "output_dir": DEFAULT_OUTPUT_DIR,
        },
        "queries": {
            "Default": {"match_all": {}},
        },
    }


class ExportConfig:
    """
    Configuration for the export tool.

    Loads profiles from a YAML file. Passwords are never read from or
    written to the file; they are supplied at runtime.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (optional)
        """
        self.config_path = Path(config_path) if config_path else None
        self.config = self._load_config() if self.config_path else self._default_config()
        self._strip_passwords()
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise ConfigError(f"Config file not found: {self.config_path}")

        logger.info(f"Loading config from: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {self.config_path}: {e}")

        if config is None:
            return self._default_config()
        if not isinstance(config, dict):
            raise ConfigError(f"Config file must contain a mapping: {self.config_path}")

        config.setdefault("profiles", {})
        config.setdefault("settings", {})
        if not config.get("default_profile") and config["profiles"]:
            config["default_profile"] = next(iter(config["profiles"]))
        return config

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "default_profile": "default",
            "profiles": {"default": default_profile()},
            "settings": {
                "ignore_tls_errors": False,
                "log_level": "INFO",
                "request_timeout": 30,
                "release_timeout": 5,
            },
        }

    def _strip_passwords(self) -> None:
        for name, profile in (self.config.get("profiles") or {}).items():
            connection = (profile or {}).get("connection") or {}
            if connection.pop("password", None) is not None:
                logger.warning(f"Ignoring password stored in profile '{name}'; supply it at runtime")

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        output_dir = os.environ.get(OUTPUT_DIR_ENV)
        if output_dir:
            for profile in self.config.get("profiles", {}).values():
                profile.setdefault("export", {})["output_dir"] = output_dir

    def get_settings(self) -> Dict[str, Any]:
        """Get global settings."""
        return self.config.get("settings", {})

    def get_profile_names(self) -> List[str]:
        """Get the names of all profiles."""
        return list(self.config.get("profiles", {}))

    def get_profile(self, name: Optional[str] = None) -> Dict[str, Any]:
        """Get a profile by name, or the default profile."""
        name = name or self.config.get("default_profile")
        profiles = self.config.get("profiles", {})
        if name not in profiles:
            raise ConfigError(f"Profile not found: {name}")
        return profiles[name] or {}

    def connection_spec(self, profile_name: Optional[str] = None, **overrides) -> ConnectionSpec:
        """
        Build the ConnectionSpec for a profile.

        Keyword overrides with a None value are ignored. TLS verification
        is skipped when either the profile or the global setting asks
        for it.
        """
        values = dict(self.get_profile(profile_name).get("connection") or {})
        values.update({k: v for k, v in overrides.items() if v is not None})
        ignore_tls = bool(values.get("ignore_tls_errors")) or bool(
            self.get_settings().get("ignore_tls_errors")
        )
        return ConnectionSpec(
            endpoint=values.get("endpoint", ""),
            index=values.get("index", ""),
            username=values.get("username") or "",
            ignore_tls_errors=ignore_tls,
        )

    def export_spec(self, profile_name: Optional[str] = None, **overrides) -> ExportSpec:
        """Build the ExportSpec for a profile; None-valued overrides are ignored."""
        values = dict(self.get_profile(profile_name).get("export") or {})
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ExportSpec(
            format=values.get("format", "csv"),
            fields=values.get("fields") or (),
            batch_size=values.get("batch_size", DEFAULT_BATCH_SIZE),
            scroll_timeout=values.get("scroll_timeout", DEFAULT_SCROLL_TIMEOUT),
            output_dir=Path(values.get("output_dir") or DEFAULT_OUTPUT_DIR),
        )

    def get_query(self, profile_name: Optional[str] = None, query_name: Optional[str] = None) -> Any:
        """Get a saved query; the first one when query_name is None."""
        queries = self.get_profile(profile_name).get("queries") or {}
        if not queries:
            return {"match_all": {}}
        if query_name is None:
            return copy.deepcopy(next(iter(queries.values())))
        if query_name not in queries:
            raise ConfigError(f"Query not found: {query_name}")
        return copy.deepcopy(queries[query_name])

    def get_password(self) -> Optional[str]:
        """Get the runtime password from the environment."""
        return os.environ.get(PASSWORD_ENV) or None

    def save_profile(self, name: str, profile: Dict[str, Any], path: Optional[Path] = None) -> Path:
        """
        Add or replace a profile and write the config file.

        Any password in the profile is dropped before saving.
        """
        path = Path(path) if path else self.config_path
        if path is None:
            raise ConfigError("No config path to save to")

        profile = copy.deepcopy(profile)
        (profile.get("connection") or {}).pop("password", None)
        self.config.setdefault("profiles", {})[name] = profile
        if not self.config.get("default_profile"):
            self.config["default_profile"] = name

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.config, f, sort_keys=False, allow_unicode=True)

        logger.info(f"Saved profile '{name}' to {path}")
        return path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default
