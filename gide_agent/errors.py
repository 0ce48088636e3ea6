"""Exception types raised by the agent backend"""

from __future__ import annotations


class GideAgentError(Exception):
    """Base class for agent backend errors"""


class AgentConfigurationError(GideAgentError):
    """Agent endpoint or timeout configuration is missing or invalid"""


class ConfigPersistenceError(GideAgentError):
    """Configuration could not be written to disk"""


class AgentHTTPError(GideAgentError):
    """The agent answered with a non-2xx status"""

    def __init__(self, status: int, reason: str = ""):
        self.status = status
        self.reason = reason
        super().__init__(f"HTTP {status}: {reason}" if reason else f"HTTP {status}")
