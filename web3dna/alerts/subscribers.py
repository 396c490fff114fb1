"""Live alert subscribers (admin panels connected over websockets)."""

import asyncio
from typing import Protocol, Set

import structlog
from starlette.websockets import WebSocket, WebSocketState

from web3dna.utils.metrics import metrics

logger = structlog.get_logger(__name__)


class LiveSubscriber(Protocol):
    @property
    def is_open(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...


class WebSocketSubscriber:
    """Adapts a Starlette websocket to the subscriber interface."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (self.websocket.client_state == WebSocketState.CONNECTED
                and self.websocket.application_state == WebSocketState.CONNECTED)

    async def send_text(self, data: str) -> None:
        await self.websocket.send_text(data)


class SubscriberHub:
    """Set of currently connected live subscribers."""

    def __init__(self):
        self._subscribers: Set[LiveSubscriber] = set()
        self.logger = logger.bind(component="subscriber_hub")

    def __len__(self) -> int:
        return len(self._subscribers)

    def add(self, subscriber: LiveSubscriber) -> None:
        self._subscribers.add(subscriber)
        metrics.live_subscribers.set(len(self._subscribers))
        self.logger.info("Admin panel connected", subscribers=len(self._subscribers))

    def discard(self, subscriber: LiveSubscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.discard(subscriber)
            metrics.live_subscribers.set(len(self._subscribers))
            self.logger.info("Admin panel disconnected", subscribers=len(self._subscribers))

    async def _send(self, subscriber: LiveSubscriber, payload: str) -> bool:
        try:
            await subscriber.send_text(payload)
            return True
        except Exception as e:
            self.logger.warning("Live subscriber send failed, dropping", error=str(e))
            self.discard(subscriber)
            return False

    async def broadcast(self, payload: str) -> int:
        """
        Send ``payload`` to every open subscriber.

        Subscribers that are not open are skipped; subscribers that fail
        mid-send are dropped. Returns the number of successful sends.
        """
        targets = [subscriber for subscriber in list(self._subscribers) if subscriber.is_open]
        if not targets:
            return 0
        results = await asyncio.gather(*(self._send(subscriber, payload) for subscriber in targets))
        return sum(1 for delivered in results if delivered)
