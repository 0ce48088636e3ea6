from __future__ import annotations

import asyncio

import pytest
from aiohttp import test_utils, web

from gide_agent.errors import AgentConfigurationError
from gide_agent.models import AgentResponse, ContextMode, EditorContext, RequestState
from gide_agent.services.agent_client import AgentClient
from gide_agent.services.conversation import Conversation, generate_request_id

EDITOR_CONTEXT = EditorContext(
    current_file="test.js",
    language="javascript",
    selected_text="arr.sort()",
    line_number=3,
    column=1,
    workspace_root="demo",
)


def make_conversation(client, mode=ContextMode.FILE):
    return Conversation(client=client, context_mode=mode, context_provider=lambda: EDITOR_CONTEXT)


class TestSubmit:
    """submit() transitions and the entries it records"""

    def test_file_mode_sends_file_and_language_only(self, fake_client):
        conversation = make_conversation(fake_client)

        entry = asyncio.run(conversation.submit("sort an array"))

        sent = fake_client.requests[0]
        assert sent.request == "sort an array"
        assert sent.context.to_payload() == {"currentFile": "test.js", "language": "javascript"}
        assert entry.success is True
        assert entry.context == sent.context

    def test_none_mode_sends_no_context(self, fake_client):
        conversation = make_conversation(fake_client, ContextMode.NONE)
        asyncio.run(conversation.submit("hello"))
        assert fake_client.requests[0].context is None

    def test_success_clears_pending_input(self, fake_client):
        conversation = make_conversation(fake_client)
        conversation.set_current_request("sort an array")

        asyncio.run(conversation.submit("sort an array"))

        snapshot = conversation.snapshot()
        assert snapshot.current_request == ""
        assert snapshot.error is None
        assert snapshot.is_loading is False
        assert snapshot.state is RequestState.IDLE
        assert len(snapshot.conversations) == 1

    def test_failure_keeps_input_and_records_error(self, fake_client):
        async def fail(request, cancel_event):
            return AgentResponse(id=request.id, success=False, error="HTTP 502: <Bad Gateway>")

        fake_client.handler = fail
        conversation = make_conversation(fake_client)

        entry = asyncio.run(conversation.submit("sort an array"))

        assert entry.success is False
        assert entry.error == "HTTP 502: &lt;Bad Gateway&gt;"
        snapshot = conversation.snapshot()
        assert snapshot.current_request == "sort an array"
        assert snapshot.error == entry.error
        assert snapshot.state is RequestState.IDLE

    def test_failure_without_message_gets_placeholder(self, fake_client):
        async def fail(request, cancel_event):
            return AgentResponse(id=request.id, success=False)

        fake_client.handler = fail
        entry = asyncio.run(make_conversation(fake_client).submit("x"))
        assert entry.error == "Unknown error"

    def test_client_exception_becomes_failed_entry(self, fake_client):
        async def explode(request, cancel_event):
            raise RuntimeError("boom")

        fake_client.handler = explode
        conversation = make_conversation(fake_client)

        entry = asyncio.run(conversation.submit("x"))

        assert entry.success is False
        assert "boom" in entry.error
        assert conversation.state is RequestState.IDLE

    def test_response_is_encoded_once_for_display(self, fake_client):
        async def answer(request, cancel_event):
            return AgentResponse(id=request.id, success=True, response="Use <b>sorted</b> &amp; done")

        fake_client.handler = answer
        entry = asyncio.run(make_conversation(fake_client).submit("<why>"))

        assert entry.response == "Use &lt;b&gt;sorted&lt;&#x2F;b&gt; &amp;amp; done"
        assert entry.request == "&lt;why&gt;"
        assert fake_client.requests[0].request == "<why>"

    def test_suggestions_extracted_from_successful_entries(self, fake_client):
        async def answer(request, cancel_event):
            return AgentResponse(id=request.id, success=True, response="```javascript\nfunction hello(){}\n```")

        fake_client.handler = answer
        conversation = make_conversation(fake_client)
        entry = asyncio.run(conversation.submit("hello fn"))

        suggestions = conversation.suggestions_for(entry.id)
        assert len(suggestions) == 1
        assert suggestions[0].language == "javascript"

    @pytest.mark.parametrize("text", ["", "   \n\t", None])
    def test_empty_submit_is_ignored(self, fake_client, text):
        conversation = make_conversation(fake_client)
        assert asyncio.run(conversation.submit(text)) is None
        assert fake_client.requests == []
        assert conversation.entries == []

    def test_unconfigured_client_raises(self):
        conversation = Conversation()
        with pytest.raises(AgentConfigurationError):
            asyncio.run(conversation.submit("hello"))

    def test_state_transitions(self, fake_client):
        conversation = make_conversation(fake_client)
        states = []
        conversation.add_state_listener(states.append)

        asyncio.run(conversation.submit("hello"))

        assert states == [RequestState.SUBMITTING, RequestState.RESOLVED, RequestState.IDLE]

    def test_entries_are_appended_in_order(self, fake_client):
        ids = iter(["first", "second"])
        conversation = Conversation(client=fake_client, id_factory=lambda: next(ids))

        async def run_both():
            await conversation.submit("one")
            await conversation.submit("two")

        asyncio.run(run_both())
        assert [e.id for e in conversation.entries] == ["first", "second"]


class TestSingleFlight:
    def test_submit_while_busy_is_ignored(self, fake_client):
        async def scenario():
            gate = asyncio.Event()

            async def slow(request, cancel_event):
                await gate.wait()
                return AgentResponse(id=request.id, success=True, response="done")

            fake_client.handler = slow
            conversation = make_conversation(fake_client)

            first = asyncio.ensure_future(conversation.submit("one"))
            await asyncio.sleep(0)
            assert conversation.is_loading
            second = await conversation.submit("two")

            gate.set()
            return conversation, await first, second

        conversation, first, second = asyncio.run(scenario())

        assert second is None
        assert first.success is True
        assert len(fake_client.requests) == 1
        assert len(conversation.entries) == 1

    def test_cancel_in_flight_request(self, fake_client):
        async def scenario():
            async def wait_for_cancel(request, cancel_event):
                await cancel_event.wait()
                return AgentResponse(id=request.id, success=False, error="Request cancelled")

            fake_client.handler = wait_for_cancel
            conversation = make_conversation(fake_client)

            pending = asyncio.ensure_future(conversation.submit("long task"))
            await asyncio.sleep(0)
            cancelled = conversation.cancel()
            return conversation, cancelled, await pending

        conversation, cancelled, entry = asyncio.run(scenario())

        assert cancelled is True
        assert entry.success is False
        assert entry.error == "Request cancelled"
        assert conversation.cancel() is False
        assert conversation.state is RequestState.IDLE


def test_timeout_produces_failed_entry_and_keeps_input():
    async def slow(request):
        await asyncio.sleep(0.5)
        return web.json_response({"response": "late"})

    async def scenario():
        app = web.Application()
        app.router.add_post("/agent", slow)
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            client = AgentClient({"endpoint": str(server.make_url("/agent")), "timeout": 50})
            conversation = make_conversation(client)
            entry = await conversation.submit("sort an array")
            return conversation, entry
        finally:
            await server.close()

    conversation, entry = asyncio.run(scenario())

    assert entry.success is False
    assert "timeout" in entry.error.lower()
    assert conversation.snapshot().current_request == "sort an array"


def test_clear_history(fake_client):
    conversation = make_conversation(fake_client)
    asyncio.run(conversation.submit("hello"))

    conversation.clear_history()

    assert conversation.entries == []
    assert conversation.snapshot().conversations == []


def test_set_context_mode(fake_client):
    conversation = make_conversation(fake_client)
    conversation.set_context_mode("selection")
    assert conversation.selected_context().selected_text == "arr.sort()"

    with pytest.raises(ValueError):
        conversation.set_context_mode("everything")
    assert conversation.context_mode is ContextMode.SELECTION


def test_generate_request_id_is_unique():
    ids = {generate_request_id() for _ in range(50)}
    assert len(ids) == 50
