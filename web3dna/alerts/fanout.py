"""
Fraud alert fan-out.

One alert goes to three sinks: live subscribers, the chat-ops webhook and
the admin webhook. Each delivery runs as its own task; a failing or slow
sink never holds up or cancels the others, and no delivery result reaches
the caller. Outcomes are only recorded for logs, metrics and inspection.
"""

import asyncio
import json
from collections import deque
from typing import Awaitable, Callable, Deque, List, Optional, Set

import httpx
import structlog

from web3dna.alerts.subscribers import SubscriberHub
from web3dna.alerts.webhooks import AdminWebhookSender, ChatWebhookSender
from web3dna.models.alerts import AlertEvent, DeliveryOutcome, DeliveryStatus
from web3dna.models.config import Web3DNAConfig
from web3dna.utils.metrics import metrics

logger = structlog.get_logger(__name__)

LIVE_SINK = "websocket"


class AlertFanout:
    """Fire-and-forget alert delivery to every configured sink."""

    def __init__(self, config: Optional[Web3DNAConfig] = None,
                 hub: Optional[SubscriberHub] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.config = config or Web3DNAConfig()
        self.hub = hub if hub is not None else SubscriberHub()

        self._owns_client = client is None
        self.client = client if client is not None else httpx.AsyncClient()

        self.chat = ChatWebhookSender(self.config.mattermost_webhook_url, self.client,
                                      timeout=self.config.webhook_timeout_seconds)
        self.admin = AdminWebhookSender(self.config.admin_webhook_url, self.client,
                                        timeout=self.config.webhook_timeout_seconds)

        self._tasks: Set[asyncio.Task] = set()
        self._outcomes: Deque[DeliveryOutcome] = deque(maxlen=self.config.recent_outcomes_size)
        self.logger = logger.bind(component="alert_fanout")

    def send_alert(self, event: AlertEvent) -> None:
        """
        Start all three deliveries and return immediately.

        Must be called from a running event loop. Use ``drain()`` to wait
        for in-flight deliveries.
        """
        metrics.alerts_dispatched.labels(severity=event.severity.value).inc()
        self.logger.info("Dispatching fraud alert",
                        severity=event.severity.value,
                        risk_score=event.risk_score,
                        dna_hash=event.dna_hash)

        for delivery in (self.broadcast_live, self.send_chat_alert, self.send_admin_alert):
            task = asyncio.ensure_future(delivery(event))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def broadcast_live(self, event: AlertEvent) -> DeliveryOutcome:
        """Send the event envelope to every open live subscriber."""
        payload = json.dumps(event.to_envelope())

        async def deliver() -> DeliveryStatus:
            delivered = await self.hub.broadcast(payload)
            return DeliveryStatus.DELIVERED if delivered else DeliveryStatus.SKIPPED

        return await self._deliver(LIVE_SINK, event, deliver)

    async def send_chat_alert(self, event: AlertEvent) -> DeliveryOutcome:
        """POST the formatted message to the chat-ops webhook, if configured."""
        return await self._deliver(self.chat.sink, event, lambda: self.chat.deliver(event))

    async def send_admin_alert(self, event: AlertEvent) -> DeliveryOutcome:
        """POST the raw event envelope to the admin webhook, if configured."""
        return await self._deliver(self.admin.sink, event, lambda: self.admin.deliver(event))

    async def _deliver(self, sink: str, event: AlertEvent,
                       action: Callable[[], Awaitable[DeliveryStatus]]) -> DeliveryOutcome:
        try:
            status = await action()
            outcome = DeliveryOutcome(sink=sink, status=status, dna_hash=event.dna_hash)
        except httpx.TimeoutException:
            self.logger.error("Alert delivery timed out", sink=sink,
                              timeout=self.config.webhook_timeout_seconds)
            outcome = DeliveryOutcome(sink=sink, status=DeliveryStatus.FAILED,
                                      dna_hash=event.dna_hash, detail="timeout")
        except Exception as e:
            self.logger.error("Alert delivery failed", sink=sink, error=str(e))
            outcome = DeliveryOutcome(sink=sink, status=DeliveryStatus.FAILED,
                                      dna_hash=event.dna_hash, detail=str(e))

        self._outcomes.append(outcome)
        metrics.alert_deliveries.labels(sink=sink, status=outcome.status.value).inc()
        return outcome

    def recent_outcomes(self) -> List[DeliveryOutcome]:
        """Most recent delivery outcomes, oldest first."""
        return list(self._outcomes)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every in-flight delivery has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Drain deliveries and release the HTTP client if this fan-out created it."""
        await self.drain()
        if self._owns_client:
            await self.client.aclose()
