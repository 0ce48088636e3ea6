"""
Context Watcher - Re-collect editor context whenever the host reports a change
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Optional, Protocol

from ..models.context import EditorContext, EditorSnapshot
from .context_selector import collect_from_provider

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
Unsubscribe = Callable[[], None]
ContextCallback = Callable[[Optional[EditorContext]], None]


class EditorHost(Protocol):
    """Event sources and state accessors supplied by the host editor"""

    def on_active_editor_change(self, listener: Listener) -> Unsubscribe: ...

    def on_selection_change(self, listener: Listener) -> Unsubscribe: ...

    def on_workspace_folders_change(self, listener: Listener) -> Unsubscribe: ...

    def snapshot(self) -> EditorSnapshot | None: ...


class InMemoryEditorHost:
    """Editor host whose state is pushed in (over HTTP or from tests)"""

    def __init__(self, snapshot: EditorSnapshot | None = None):
        self._snapshot = snapshot
        self._listeners: dict[str, list[Listener]] = {
            "active_editor": [],
            "selection": [],
            "workspace_folders": [],
        }

    def _subscribe(self, kind: str, listener: Listener) -> Unsubscribe:
        self._listeners[kind].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[kind]:
                self._listeners[kind].remove(listener)

        return unsubscribe

    def on_active_editor_change(self, listener: Listener) -> Unsubscribe:
        return self._subscribe("active_editor", listener)

    def on_selection_change(self, listener: Listener) -> Unsubscribe:
        return self._subscribe("selection", listener)

    def on_workspace_folders_change(self, listener: Listener) -> Unsubscribe:
        return self._subscribe("workspace_folders", listener)

    def snapshot(self) -> EditorSnapshot | None:
        return self._snapshot

    def listener_count(self) -> int:
        return sum(len(listeners) for listeners in self._listeners.values())

    def update(self, snapshot: EditorSnapshot | None) -> None:
        """Replace the editor state and fire the events matching what changed"""
        previous = self._snapshot or EditorSnapshot()
        current = snapshot or EditorSnapshot()
        self._snapshot = snapshot

        fired = []
        if (previous.active_document_path, previous.active_document_language) != (
            current.active_document_path,
            current.active_document_language,
        ):
            fired.append("active_editor")
        if (previous.selection_text, previous.selection_line, previous.selection_character) != (
            current.selection_text,
            current.selection_line,
            current.selection_character,
        ):
            fired.append("selection")
        if previous.workspace_folders != current.workspace_folders:
            fired.append("workspace_folders")

        for kind in fired:
            for listener in list(self._listeners[kind]):
                listener()


class ContextWatcher:
    """Watch the host editor and hand fresh context snapshots to one subscriber.

    Every event triggers a full re-collection. With ``debounce_ms`` > 0 and a
    running event loop, bursts of events are coalesced into one collection
    fired after the quiet period.
    """

    def __init__(self, host: EditorHost, debounce_ms: float = 0):
        self._host = host
        self._debounce_ms = debounce_ms
        self._callback: ContextCallback | None = None
        self._pending: asyncio.TimerHandle | None = None
        self._disposed = False
        self._subscriptions: list[Unsubscribe] = [
            host.on_active_editor_change(self._on_host_event),
            host.on_selection_change(self._on_host_event),
            host.on_workspace_folders_change(self._on_host_event),
        ]

    def on_context_changed(self, callback: ContextCallback | None) -> None:
        """Set (or clear) the subscriber"""
        self._callback = callback

    def current_context(self) -> EditorContext | None:
        return collect_from_provider(self._host.snapshot)

    def _on_host_event(self) -> None:
        if self._debounce_ms <= 0:
            self.notify_context_changed()
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.notify_context_changed()
            return

        if self._pending is not None:
            self._pending.cancel()
        self._pending = loop.call_later(self._debounce_ms / 1000, self._fire_pending)

    def _fire_pending(self) -> None:
        self._pending = None
        self.notify_context_changed()

    def notify_context_changed(self) -> None:
        """Re-collect the context and pass it to the subscriber"""
        if self._disposed or self._callback is None:
            return
        self._callback(self.current_context())

    def dispose(self) -> None:
        """Unregister from the host; no callbacks fire afterwards"""
        if self._disposed:
            return
        self._disposed = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()
        logger.debug("[ContextWatcher] Disposed")

    @property
    def disposed(self) -> bool:
        return self._disposed

    def __enter__(self) -> "ContextWatcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()


class ContextEventStream:
    """Fan context changes out to any number of async listeners (SSE clients)"""

    def __init__(self, max_queue: int = 100):
        self._queues: set[asyncio.Queue] = set()
        self._max_queue = max_queue

    def publish(self, context: EditorContext | None) -> None:
        for queue in list(self._queues):
            if queue.full():
                # Drop the oldest snapshot
                queue.get_nowait()
            queue.put_nowait(context)

    async def listen(self):
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue)
        self._queues.add(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._queues.discard(queue)

    @property
    def listener_count(self) -> int:
        return len(self._queues)
