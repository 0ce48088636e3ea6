"""
Agent Runtime - Composition root wiring the watcher, client and conversation together
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import aiohttp

from ..errors import AgentConfigurationError
from ..models.context import ContextMode, EditorContext, EditorSnapshot
from .agent_client import AgentClient
from .config_manager import ConfigManager
from .context_watcher import ContextEventStream, ContextWatcher, EditorHost, InMemoryEditorHost
from .conversation import Conversation
from .error_tracker import ErrorTracker

logger = logging.getLogger(__name__)


class AgentRuntime:
    """Everything one editor session needs, with an explicit lifetime.

    Created by the application factory and stored on ``app.state``; tests
    build their own instance instead of sharing module-level state.
    """

    def __init__(
        self,
        config_manager: ConfigManager | None = None,
        host: EditorHost | None = None,
        error_tracker: ErrorTracker | None = None,
    ):
        self.config_manager = config_manager or ConfigManager()
        self.error_tracker = error_tracker or ErrorTracker()
        self.host = host or InMemoryEditorHost()
        self.events = ContextEventStream()
        self.configuration_error: str | None = None
        self._session: aiohttp.ClientSession | None = None

        config = self.config_manager.get_effective_config()
        self.watcher = self._build_watcher(config)
        self.conversation = Conversation(
            context_mode=self._initial_mode(config.get("contextMode")),
            context_provider=lambda: self.watcher.current_context(),
        )
        self.configure()

    def _build_watcher(self, config: dict[str, Any]) -> ContextWatcher:
        watcher = ContextWatcher(self.host, debounce_ms=config.get("debounceMs") or 0)
        watcher.on_context_changed(self._on_context_changed)
        return watcher

    @staticmethod
    def _initial_mode(value: Any) -> ContextMode:
        try:
            return ContextMode(value)
        except ValueError:
            return ContextMode.FILE

    def _on_context_changed(self, context: EditorContext | None) -> None:
        self.conversation.update_context(context)
        self.events.publish(context)

    def configure(self) -> bool:
        """(Re)build the agent client from the current configuration"""
        try:
            client_config = self.config_manager.get_client_config()
            client = AgentClient(client_config, error_tracker=self.error_tracker, session=self._session)
        except AgentConfigurationError as e:
            logger.warning("[AgentRuntime] Agent not configured: %s", e)
            self.configuration_error = str(e)
            self.conversation.client = None
            return False

        self.configuration_error = None
        self.conversation.client = client
        logger.info("[AgentRuntime] Agent client ready for %s", client_config.endpoint)
        return True

    def push_snapshot(self, snapshot: EditorSnapshot | None) -> None:
        """Feed editor state reported by the extension into the host"""
        if not isinstance(self.host, InMemoryEditorHost):
            raise TypeError("This editor host does not accept pushed snapshots")
        self.host.update(snapshot)

    @property
    def client(self) -> AgentClient | None:
        return self.conversation.client

    def require_client(self) -> AgentClient:
        """The configured client, or AgentConfigurationError ("configuration required")"""
        if self.conversation.client is None:
            raise AgentConfigurationError(self.configuration_error or "Agent endpoint is not configured")
        return self.conversation.client

    async def start(self) -> None:
        """Open the HTTP session shared by agent requests, re-arming the watcher after close()"""
        if self.watcher.disposed:
            self.watcher = self._build_watcher(self.config_manager.get_effective_config())
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        self.configure()

    async def close(self) -> None:
        self.watcher.dispose()
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


def create_runtime(config_dir: str | Path | None = None) -> AgentRuntime:
    return AgentRuntime(config_manager=ConfigManager(config_dir))
