"""
Configuration Manager - Persist agent settings and resolve environment overrides
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from ..errors import AgentConfigurationError, ConfigPersistenceError
from ..models.agent import DEFAULT_REQUEST_TIMEOUT_MS, AgentClientConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "GIDE_AGENT_CONFIG_DIR"

# Environment variables take precedence over the config file
ENV_VARS = {
    "agentEndpoint": "GIDE_AGENT_ENDPOINT",
    "apiKey": "GIDE_API_KEY",
    "modelProvider": "GIDE_MODEL_PROVIDER",
    "modelName": "GIDE_MODEL_NAME",
    "requestTimeout": "GIDE_REQUEST_TIMEOUT",
}
REQUIRED_ENV_VARS = ("GIDE_AGENT_ENDPOINT",)


def mask_key(key: str | None) -> str:
    """Mask an API key for display, keeping the first and last four characters"""
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)
    return key[:4] + "*" * (len(key) - 8) + key[-4:]


def get_safe_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """Configuration without the API key, for logging and display"""
    return {key: value for key, value in config.items() if key != "apiKey"}


def validate_configuration(config: Mapping[str, Any]) -> None:
    """Raise AgentConfigurationError when the agent cannot be reached with this config"""
    endpoint = config.get("agentEndpoint") or ""
    if not endpoint:
        raise AgentConfigurationError(
            f"Missing required environment variables: {ENV_VARS['agentEndpoint']}. "
            "Set it or configure agentEndpoint in the config file."
        )

    parsed = urlsplit(endpoint)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise AgentConfigurationError(f"Invalid agent endpoint URL: {endpoint}")

    timeout = config.get("requestTimeout")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise AgentConfigurationError("Request timeout must be a positive number")


def check_configuration_status(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Report missing required and recommended environment variables"""
    environ = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]

    warnings = []
    if not environ.get(ENV_VARS["apiKey"]):
        warnings.append(f"{ENV_VARS['apiKey']} not set - requests will be sent unauthenticated")
    if not environ.get(ENV_VARS["modelProvider"]):
        warnings.append(f"{ENV_VARS['modelProvider']} not set - using the agent's default model provider")

    return {"isValid": not missing, "missingVars": missing, "warnings": warnings}


class ConfigManager:
    """Manage configuration persistence.

    One instance is created by the application and shared through app.state.
    """

    def __init__(self, config_dir: str | Path | None = None, environ: Mapping[str, str] | None = None):
        self._environ = os.environ if environ is None else environ
        self._config_file = self._resolve_config_file(config_dir)
        self._config = self._load_config()

    def _resolve_config_file(self, config_dir: str | Path | None) -> Path:
        # Explicit dir, then the environment, then ~/.gide_agent
        config_dir = config_dir or self._environ.get(CONFIG_DIR_ENV) or os.path.expanduser("~/.gide_agent")

        try:
            config_path = Path(config_dir)
            config_path.mkdir(parents=True, exist_ok=True)
            return config_path / "config.json"
        except OSError as e:
            logger.warning("[ConfigManager] Cannot write to %s: %s", config_dir, e)

        # Fall back to the temp dir when the preferred location is not writable
        tmp_dir = Path(tempfile.gettempdir()) / "gide_agent"
        tmp_dir.mkdir(parents=True, exist_ok=True)
        logger.info("[ConfigManager] Using temporary config path: %s", tmp_dir / "config.json")
        return tmp_dir / "config.json"

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, filling in defaults"""
        config = self._default_config()
        if not self._config_file.exists():
            return config

        try:
            with open(self._config_file) as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("[ConfigManager] Error loading config: %s", e)
            return config

        if isinstance(stored, dict):
            config.update(stored)
        return config

    def _default_config(self) -> dict[str, Any]:
        return {
            "agentEndpoint": "",
            "requestTimeout": DEFAULT_REQUEST_TIMEOUT_MS,
            "apiKey": "",
            "modelProvider": "",
            "modelName": "",
            "contextMode": "file",
            "debounceMs": 0,
            "server": {"host": "0.0.0.0", "port": 8000},
        }

    def get_config(self) -> dict[str, Any]:
        """Stored configuration (file merged over defaults), reloaded from disk"""
        self._config = self._load_config()
        return dict(self._config)

    def get_effective_config(self) -> dict[str, Any]:
        """Stored configuration with environment overrides applied"""
        config = self.get_config()
        for key, env_name in ENV_VARS.items():
            value = self._environ.get(env_name)
            if not value:
                continue
            if key == "requestTimeout":
                try:
                    config[key] = int(value)
                except ValueError:
                    logger.warning("[ConfigManager] Ignoring non-numeric %s=%r", env_name, value)
                    continue
            else:
                config[key] = value
        return config

    def get_client_config(self) -> AgentClientConfig:
        """Validated agent client configuration; raises AgentConfigurationError"""
        config = self.get_effective_config()
        validate_configuration(config)
        return AgentClientConfig(
            endpoint=config["agentEndpoint"],
            timeout=config["requestTimeout"],
            api_key=config.get("apiKey") or None,
            model_provider=config.get("modelProvider") or None,
            model_name=config.get("modelName") or None,
        )

    def save_config(self, config: Mapping[str, Any]) -> None:
        """Merge into the stored configuration and write it to disk"""
        self._config.update(config)
        self._config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._config_file, "w") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            raise ConfigPersistenceError(f"Failed to save config: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.save_config({key: value})
