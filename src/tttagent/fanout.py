"""Push game state to every connected observer."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Protocol

from fastapi import WebSocketDisconnect

from .game import GameState

logger = logging.getLogger(__name__)


class Connection(Protocol):
    async def send_json(self, data: Any) -> None: ...


def state_event(state: Dict[str, object]) -> Dict[str, object]:
    return {"type": "state", "state": state}


def error_event(message: str) -> Dict[str, object]:
    return {"type": "error", "message": message}


class Broadcaster:
    """Observer list for one session.

    Sends are serialized through a single lock, so every observer sees events
    in the order they were published. A connection that fails to receive is
    dropped.
    """

    def __init__(self, snapshot: Callable[[], Dict[str, object]]) -> None:
        self._snapshot = snapshot
        self._observers: List[Connection] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._observers)

    async def attach(self, connection: Connection) -> None:
        """Register ``connection`` and send it the current state."""

        async with self._lock:
            self._observers.append(connection)
            await self._send(connection, state_event(self._snapshot()))

    def detach(self, connection: Connection) -> None:
        if connection in self._observers:
            self._observers.remove(connection)

    async def publish(self, state: GameState) -> None:
        event = state_event(state.to_dict())
        async with self._lock:
            for connection in list(self._observers):
                await self._send(connection, event)

    async def send_error(self, connection: Connection, message: str) -> None:
        async with self._lock:
            await self._send(connection, error_event(message))

    async def _send(self, connection: Connection, event: Dict[str, object]) -> None:
        try:
            await connection.send_json(event)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            logger.info("Dropping observer after failed send: %r", exc)
            self.detach(connection)
