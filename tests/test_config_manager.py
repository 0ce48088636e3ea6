from __future__ import annotations

import json

import pytest

from gide_agent.errors import AgentConfigurationError
from gide_agent.services.config_manager import (
    ConfigManager,
    check_configuration_status,
    get_safe_config,
    mask_key,
    validate_configuration,
)


class TestConfigManager:
    """Persistence, defaults and environment overrides"""

    def test_defaults_without_file(self, tmp_path):
        config = ConfigManager(tmp_path, environ={}).get_config()
        assert config["agentEndpoint"] == ""
        assert config["requestTimeout"] == 30000
        assert config["contextMode"] == "file"

    def test_save_and_reload(self, tmp_path):
        ConfigManager(tmp_path, environ={}).save_config({"agentEndpoint": "http://localhost:9000/agent"})

        reloaded = ConfigManager(tmp_path, environ={})
        assert reloaded.get("agentEndpoint") == "http://localhost:9000/agent"
        assert json.loads((tmp_path / "config.json").read_text())["requestTimeout"] == 30000

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json")
        assert ConfigManager(tmp_path, environ={}).get_config()["requestTimeout"] == 30000

    def test_config_dir_from_environment(self, tmp_path):
        manager = ConfigManager(environ={"GIDE_AGENT_CONFIG_DIR": str(tmp_path / "cfg")})
        assert manager.config_file == tmp_path / "cfg" / "config.json"

    def test_environment_takes_precedence(self, tmp_path):
        ConfigManager(tmp_path, environ={}).save_config({"agentEndpoint": "http://file", "modelName": "file-model"})
        environ = {
            "GIDE_AGENT_ENDPOINT": "https://env.example.com/agent",
            "GIDE_API_KEY": "secret-key-123",
            "GIDE_REQUEST_TIMEOUT": "not-a-number",
        }

        config = ConfigManager(tmp_path, environ=environ).get_effective_config()

        assert config["agentEndpoint"] == "https://env.example.com/agent"
        assert config["apiKey"] == "secret-key-123"
        assert config["modelName"] == "file-model"
        assert config["requestTimeout"] == 30000

    def test_client_config(self, tmp_path):
        environ = {"GIDE_AGENT_ENDPOINT": "https://api.example.com", "GIDE_REQUEST_TIMEOUT": "5000"}
        client_config = ConfigManager(tmp_path, environ=environ).get_client_config()
        assert client_config.endpoint == "https://api.example.com"
        assert client_config.timeout == 5000
        assert client_config.api_key is None

    def test_client_config_requires_endpoint(self, tmp_path):
        with pytest.raises(AgentConfigurationError, match="GIDE_AGENT_ENDPOINT"):
            ConfigManager(tmp_path, environ={}).get_client_config()


class TestValidation:
    def test_rejects_invalid_endpoint(self):
        with pytest.raises(AgentConfigurationError, match="Invalid agent endpoint"):
            validate_configuration({"agentEndpoint": "not-a-url", "requestTimeout": 1000})

    @pytest.mark.parametrize("timeout", [0, -5, "30000", True, None])
    def test_rejects_invalid_timeout(self, timeout):
        with pytest.raises(AgentConfigurationError):
            validate_configuration({"agentEndpoint": "http://localhost", "requestTimeout": timeout})

    def test_status_reports_missing_and_warnings(self):
        status = check_configuration_status({})
        assert status["isValid"] is False
        assert status["missingVars"] == ["GIDE_AGENT_ENDPOINT"]
        assert len(status["warnings"]) == 2

        full = {"GIDE_AGENT_ENDPOINT": "http://x", "GIDE_API_KEY": "k", "GIDE_MODEL_PROVIDER": "openai"}
        assert check_configuration_status(full) == {"isValid": True, "missingVars": [], "warnings": []}


def test_mask_key():
    assert mask_key("") == ""
    assert mask_key("short") == "*****"
    assert mask_key("abcdefghijkl") == "abcd****ijkl"


def test_safe_config_drops_api_key():
    assert get_safe_config({"apiKey": "secret", "modelName": "m"}) == {"modelName": "m"}
