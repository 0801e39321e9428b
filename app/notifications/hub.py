"""
Broadcast Hub

Registry of connected real-time subscribers. Every subscriber receives every
event; filtering is left to the client.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from app.utils import new_id, utcnow

logger = logging.getLogger(__name__)


@dataclass
class Subscriber:
    """A connected WebSocket"""
    websocket: WebSocket
    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    connected_at: datetime = field(default_factory=utcnow)


class BroadcastHub:
    """
    Fan-out channel to all connected WebSockets

    Delivery is at-most-once: a socket that is gone when an event is sent
    misses it, and a socket that fails a send is dropped.
    """

    def __init__(self):
        self._subscribers: Dict[str, Subscriber] = {}
        self._lock = asyncio.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def connect(self, websocket: WebSocket, user_id: Optional[str] = None) -> Subscriber:
        await websocket.accept()
        subscriber = Subscriber(websocket=websocket, user_id=user_id)
        async with self._lock:
            self._subscribers[subscriber.id] = subscriber
        logger.info("WebSocket connected: subscriber=%s user=%s", subscriber.id, user_id or "anonymous")
        return subscriber

    async def disconnect(self, subscriber_id: str) -> None:
        async with self._lock:
            subscriber = self._subscribers.pop(subscriber_id, None)
        if subscriber:
            logger.info("WebSocket disconnected: subscriber=%s", subscriber_id)

    async def broadcast(self, event: str, data: Any) -> int:
        """Send to every subscriber; returns how many sends succeeded"""
        message = {
            "event": event,
            "data": data,
            "timestamp": utcnow().isoformat(),
        }

        async with self._lock:
            subscribers: List[Subscriber] = list(self._subscribers.values())

        delivered = 0
        dead: List[str] = []
        for subscriber in subscribers:
            try:
                await subscriber.websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping subscriber %s after failed send: %s", subscriber.id, e)
                dead.append(subscriber.id)

        for subscriber_id in dead:
            await self.disconnect(subscriber_id)

        return delivered

    async def close(self) -> None:
        async with self._lock:
            subscribers = list(self._subscribers.values())
            self._subscribers.clear()
        for subscriber in subscribers:
            try:
                await subscriber.websocket.close()
            except Exception as e:
                logger.debug("Error closing subscriber %s: %s", subscriber.id, e)
