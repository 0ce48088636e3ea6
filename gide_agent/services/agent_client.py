"""
Agent Client - Send sanitized requests to the remote coding agent

One POST per request, bounded by the configured timeout. Transport failures
come back as AgentResponse(success=False) instead of exceptions, and nothing
is retried automatically.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import time
from collections.abc import Mapping
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlsplit

import aiohttp
from pydantic import ValidationError

from ..errors import AgentConfigurationError, AgentHTTPError
from ..models.agent import AgentClientConfig, AgentRequest, AgentResponse, ResponseMetadata
from .error_tracker import ErrorTracker
from .sanitize import sanitize_input, sanitize_json, strip_control_chars

logger = logging.getLogger(__name__)

CONNECTION_TEST_ID = "connection-test"


class _RequestCancelled(Exception):
    pass


class AgentClient:
    """Client for the remote coding agent endpoint"""

    def __init__(
        self,
        config: AgentClientConfig | Mapping[str, Any],
        error_tracker: ErrorTracker | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        self.config = self._coerce_config(config)
        self._validate_config(self.config)
        self.error_tracker = error_tracker
        self._session = session

    # ========== Config Helpers ==========

    @staticmethod
    def _coerce_config(config: AgentClientConfig | Mapping[str, Any]) -> AgentClientConfig:
        if isinstance(config, AgentClientConfig):
            return config.model_copy()
        try:
            return AgentClientConfig.model_validate(dict(config))
        except (ValidationError, TypeError) as e:
            raise AgentConfigurationError(f"Invalid agent configuration: {e}") from e

    @staticmethod
    def _validate_config(config: AgentClientConfig) -> None:
        """Raise AgentConfigurationError unless endpoint and timeout are usable"""
        if not config.endpoint:
            raise AgentConfigurationError("Agent endpoint is required")

        parsed = urlsplit(config.endpoint.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise AgentConfigurationError(f"Invalid agent endpoint URL: {config.endpoint}")

        timeout = config.timeout
        if isinstance(timeout, bool) or not math.isfinite(timeout) or timeout <= 0:
            raise AgentConfigurationError("Timeout must be a positive number of milliseconds")

    def update_config(self, **changes: Any) -> None:
        """Merge changes into the configuration; invalid results leave it untouched"""
        merged = {**self.config.model_dump(), **changes}
        config = self._coerce_config(merged)
        self._validate_config(config)
        self.config = config

    def get_config(self) -> dict[str, Any]:
        """Current configuration without the API key"""
        return {
            "endpoint": self.config.endpoint,
            "timeout": self.config.timeout,
            "modelProvider": self.config.model_provider,
            "modelName": self.config.model_name,
        }

    # ========== Payload Builders ==========

    def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        if self.config.model_provider:
            headers["X-Model-Provider"] = self.config.model_provider
        if self.config.model_name:
            headers["X-Model-Name"] = self.config.model_name
        return headers

    def _build_payload(self, request: AgentRequest) -> dict[str, Any]:
        """Sanitized wire body; raw user text or context never leaves the client"""
        context = request.context.to_payload() if request.context else {}
        payload = {
            "id": sanitize_input(request.id),
            "request": sanitize_input(request.request),
            "context": sanitize_json(context),
        }
        if self.config.model_name:
            payload["model"] = self.config.model_name
        if self.config.model_provider:
            payload["provider"] = self.config.model_provider
        return payload

    # ========== Transport ==========

    @asynccontextmanager
    async def _session_scope(self):
        """Use the shared session if one was given, otherwise a short-lived one"""
        if self._session is not None and not self._session.closed:
            yield self._session
            return
        async with aiohttp.ClientSession() as session:
            yield session

    async def _post(self, payload: dict[str, Any]) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.config.timeout / 1000)
        async with self._session_scope() as session:
            async with session.post(
                self.config.endpoint,
                json=payload,
                headers=self._build_headers(),
                timeout=timeout,
            ) as response:
                if not 200 <= response.status < 300:
                    raise AgentHTTPError(response.status, response.reason or "")
                body = await response.text()
        return json.loads(body)

    async def _run_cancellable(self, coro, cancel_event: asyncio.Event | None):
        if cancel_event is None:
            return await coro

        request_task = asyncio.ensure_future(coro)
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        done, _ = await asyncio.wait({request_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)

        if request_task in done:
            cancel_task.cancel()
            return request_task.result()

        request_task.cancel()
        await asyncio.gather(request_task, return_exceptions=True)
        raise _RequestCancelled()

    # ========== Response Parsing ==========

    @staticmethod
    def _parse_metadata(data: Any) -> ResponseMetadata | None:
        if not isinstance(data, Mapping):
            return None

        def number(value: Any) -> float | None:
            if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
                return value
            return None

        model = data.get("model")
        return ResponseMetadata(
            model=strip_control_chars(model).strip() or None if isinstance(model, str) else None,
            tokens_used=number(data.get("tokensUsed")),
            processing_time=number(data.get("processingTime")),
        )

    def _parse_response(self, data: Any, request_id: str) -> AgentResponse:
        """Validate the agent body.

        Text is only stripped of control characters here; HTML encoding happens
        once, where the conversation turns the response into a display entry.
        """
        if not isinstance(data, Mapping):
            raise ValueError("expected a JSON object")

        response_text = data.get("response", "")
        if not isinstance(response_text, str):
            raise ValueError("'response' must be a string")

        error = data.get("error")
        return AgentResponse(
            id=sanitize_input(data.get("id")) or request_id,
            response=strip_control_chars(response_text).strip(),
            success=data.get("success") is not False,
            error=strip_control_chars(error).strip() or None if isinstance(error, str) else None,
            metadata=self._parse_metadata(data.get("metadata")),
        )

    def _failure(self, request: AgentRequest, message: str, code: str, status: int | None = None) -> AgentResponse:
        logger.warning("[AgentClient] Request %s failed: %s", request.id, message)
        if self.error_tracker is not None and code != "CANCELLED":
            self.error_tracker.track(
                message,
                provider=self.config.model_provider or "agent",
                code=code,
                status=status,
                context={"requestId": request.id, "message": request.request[:100]},
            )
        return AgentResponse(id=request.id, response="", success=False, error=message)

    # ========== Public API ==========

    async def send_request(
        self,
        request: AgentRequest,
        cancel_event: asyncio.Event | None = None,
    ) -> AgentResponse:
        """Send one request; always resolves, failures have success=False"""
        if cancel_event is not None and cancel_event.is_set():
            return self._failure(request, "Request cancelled", "CANCELLED")

        payload = self._build_payload(request)
        started = time.monotonic()
        logger.info("[AgentClient] Sending request %s to %s", payload["id"], self.config.endpoint)

        try:
            data = await self._run_cancellable(self._post(payload), cancel_event)
        except _RequestCancelled:
            return self._failure(request, "Request cancelled", "CANCELLED")
        except asyncio.TimeoutError:
            return self._failure(
                request,
                f"Request timeout: the coding agent did not respond within {self.config.timeout:g} ms",
                "TIMEOUT",
                408,
            )
        except AgentHTTPError as e:
            return self._failure(request, str(e), "HTTP_ERROR", e.status)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            return self._failure(request, f"Invalid response from agent: {e}", "INVALID_RESPONSE")
        except aiohttp.ClientError as e:
            return self._failure(request, f"Network error: unable to connect to the coding agent ({e})", "NETWORK_ERROR")

        try:
            response = self._parse_response(data, request.id)
        except (ValueError, ValidationError) as e:
            return self._failure(request, f"Invalid response from agent: {e}", "INVALID_RESPONSE")

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(
            "[AgentClient] Received response %s (success: %s, length: %d chars, %.0f ms)",
            response.id,
            response.success,
            len(response.response),
            elapsed_ms,
        )
        return response

    async def test_connection(self) -> tuple[bool, str]:
        """Send a ping request and report whether the agent answered"""
        response = await self.send_request(AgentRequest(id=CONNECTION_TEST_ID, request="ping"))
        if response.success:
            return True, "Successfully connected to the coding agent"
        return False, response.error or "Connection test failed"
