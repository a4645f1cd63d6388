"""Fan-out of conversation events to connected websocket clients."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List

from models.session_models import ConversationSession

LOGGER = logging.getLogger(__name__)


class ConnectionHub:
    """Keep one outbound queue per connected client and broadcast to all of them."""

    def __init__(self) -> None:
        self._queues: List[asyncio.Queue] = []

    @property
    def client_count(self) -> int:
        return len(self._queues)

    @contextmanager
    def connect(self) -> Iterator[asyncio.Queue]:
        """Register a client queue for the lifetime of the context."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.append(queue)
        try:
            yield queue
        finally:
            self._queues.remove(queue)

    def broadcast(self, payload: Dict[str, Any]) -> int:
        """Queue ``payload`` for every client and return how many received it."""
        for queue in list(self._queues):
            queue.put_nowait(payload)
        return len(self._queues)

    def follow(self, subscribe: Callable, render: Callable[[], Dict[str, Any]]) -> Callable[[], None]:
        """Push a fresh conversation snapshot to every client after each store mutation.

        Args:
            subscribe: The store's ``subscribe`` method.
            render: Callable returning the current view model.

        Returns:
            The unsubscribe callable.
        """

        def _on_change(event: str, session: ConversationSession) -> None:
            if not self._queues:
                return
            self.broadcast({"type": "conversation.state", "event": event, "conversation": render()})

        return subscribe(_on_change)
