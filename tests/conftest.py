"""Shared fixtures: a scripted agent client and runtimes backed by a temp config dir."""
from __future__ import annotations

import pytest

from gide_agent.models import AgentClientConfig, AgentResponse
from gide_agent.services.config_manager import ConfigManager
from gide_agent.services.runtime import AgentRuntime

AGENT_ENDPOINT = "http://agent.test/run"


class FakeAgentClient:
    """Stands in for AgentClient; records requests and answers with `handler` when set."""

    def __init__(self):
        self.config = AgentClientConfig(endpoint=AGENT_ENDPOINT)
        self.requests = []
        self.handler = None

    async def send_request(self, request, cancel_event=None):
        self.requests.append(request)
        if self.handler is not None:
            return await self.handler(request, cancel_event)
        return AgentResponse(id=request.id, response="Done", success=True)

    async def test_connection(self):
        return True, "Successfully connected to the coding agent"


@pytest.fixture
def fake_client() -> FakeAgentClient:
    return FakeAgentClient()


@pytest.fixture
def runtime(tmp_path, fake_client) -> AgentRuntime:
    manager = ConfigManager(tmp_path, environ={"GIDE_AGENT_ENDPOINT": AGENT_ENDPOINT})
    agent_runtime = AgentRuntime(config_manager=manager)
    agent_runtime.conversation.client = fake_client
    return agent_runtime


@pytest.fixture
def unconfigured_runtime(tmp_path) -> AgentRuntime:
    return AgentRuntime(config_manager=ConfigManager(tmp_path, environ={}))
