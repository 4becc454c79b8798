"""
Event definitions and emitter for the wallet connector layer.

Connectors and providers are event driven: wallets push ``accountsChanged``,
``chainChanged`` and ``disconnect`` notifications, and connectors re-emit
normalized ``change`` / ``connect`` / ``disconnect`` events to the
application.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set


class ConnectorEvent(str, Enum):
    CHANGE = "change"
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    ERROR = "error"
    MESSAGE = "message"


class ProviderEvent(str, Enum):
    ACCOUNTS_CHANGED = "accountsChanged"
    CHAIN_CHANGED = "chainChanged"
    DISCONNECT = "disconnect"


class EventEmitter:
    """
    Minimal synchronous event emitter.

    Handlers are called in registration order. A handler returning a
    coroutine is scheduled on the running loop; the emitter keeps a reference
    to the task until it finishes.

    Example:
        emitter = EventEmitter()
        emitter.on("change", lambda data: print(data))
        emitter.emit("change", {"account": "0x..."})
    """

    def __init__(self):
        self._events: Dict[str, List[Callable[..., Any]]] = {}
        self._pending: Set[asyncio.Task] = set()
        self._emitter_logger = logging.getLogger("EventEmitter")

    @staticmethod
    def _key(event: Any) -> str:
        return event.value if isinstance(event, Enum) else str(event)

    def on(self, event: Any, handler: Callable[..., Any]) -> "EventEmitter":
        self._events.setdefault(self._key(event), []).append(handler)
        return self

    add_listener = on

    def once(self, event: Any, handler: Callable[..., Any]) -> "EventEmitter":
        """Register a handler that is removed before its first call."""
        key = self._key(event)

        def _once(*args: Any, **kwargs: Any) -> Any:
            self.off(key, _once)
            return handler(*args, **kwargs)

        _once.__wrapped__ = handler  # type: ignore[attr-defined]
        return self.on(key, _once)

    def off(self, event: Any, handler: Callable[..., Any]) -> "EventEmitter":
        """Remove one registration of ``handler``; unknown handlers are ignored."""
        key = self._key(event)
        handlers = self._events.get(key)
        if not handlers:
            return self
        for index, registered in enumerate(handlers):
            # == so that bound methods match a fresh attribute lookup
            if registered == handler or getattr(registered, "__wrapped__", None) == handler:
                del handlers[index]
                break
        if not handlers:
            del self._events[key]
        return self

    remove_listener = off

    def remove_all_listeners(self, event: Any = None) -> "EventEmitter":
        if event is None:
            self._events.clear()
        else:
            self._events.pop(self._key(event), None)
        return self

    def listener_count(self, event: Any) -> int:
        return len(self._events.get(self._key(event), []))

    def listeners(self, event: Any) -> List[Callable[..., Any]]:
        return list(self._events.get(self._key(event), []))

    def emit(self, event: Any, *args: Any) -> bool:
        """
        Call every handler registered for ``event``.

        Returns:
            True if at least one handler was registered
        """
        handlers = list(self._events.get(self._key(event), []))
        for handler in handlers:
            result = handler(*args)
            if inspect.isawaitable(result):
                self._schedule(result)
        return bool(handlers)

    def _schedule(self, awaitable: Any) -> Optional[asyncio.Future]:
        """Run ``awaitable`` in the background; the task is returned (None when it already ran)."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: run the coroutine to completion right here
            asyncio.run(awaitable)
            return None
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(task)
        task.add_done_callback(self._on_handler_done)
        return task

    def _on_handler_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._emitter_logger.error(f"❌ Event handler failed: {error}")
