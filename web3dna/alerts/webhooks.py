"""
Webhook senders for the chat-ops channel and the admin panel.

A sender without a URL is disabled and reports the delivery as skipped.
Failures raise to the caller (the fan-out), which records and logs them.
"""

import time
from typing import Any, Dict, Optional

import httpx
import structlog

from web3dna.models.alerts import AlertEvent, AlertSeverity, DeliveryStatus

logger = structlog.get_logger(__name__)


SEVERITY_COLORS = {
    AlertSeverity.CRITICAL: "#FF0000",
    AlertSeverity.MODERATE: "#FFA500",
}
DEFAULT_COLOR = "#0000FF"

SEVERITY_EMOJI = {
    AlertSeverity.CRITICAL: "🚨",
    AlertSeverity.MODERATE: "⚠️",
}
DEFAULT_EMOJI = "📊"

ALERT_FOOTER = "Unmask Protocol Web3DNA"
ALERT_FOOTER_ICON = "https://unmaskprotocol.com/logo.png"


def build_chat_message(event: AlertEvent, timestamp: Optional[float] = None) -> Dict[str, Any]:
    """Format an alert as a Mattermost/Slack-style attachment message."""
    emoji = SEVERITY_EMOJI.get(event.severity, DEFAULT_EMOJI)
    
    return {
        "text": f"{emoji} **Web3DNA Alert** {emoji}",
        "attachments": [
            {
                "color": SEVERITY_COLORS.get(event.severity, DEFAULT_COLOR),
                "fields": [
                    {"short": True, "title": "Risk Score", "value": f"{event.risk_score}/100"},
                    {"short": True, "title": "Severity", "value": event.severity.value.upper()},
                    {"short": True, "title": "Wallet", "value": event.wallet or "N/A"},
                    {"short": True, "title": "Platform", "value": event.platform or "Unknown"},
                    {"short": False, "title": "Tags",
                     "value": ", ".join(event.matched_tags) if event.matched_tags else "None"},
                    {"short": False, "title": "DNA Hash", "value": f"`{event.dna_hash}`"},
                ],
                "footer": ALERT_FOOTER,
                "footer_icon": ALERT_FOOTER_ICON,
                "ts": int(timestamp if timestamp is not None else time.time()),
            }
        ],
    }


class WebhookSender:
    """POSTs one JSON body per alert to a configured URL."""
    
    sink = "webhook"
    
    def __init__(self, url: Optional[str], client: httpx.AsyncClient, timeout: float = 5.0):
        self.url = url
        self.client = client
        self.timeout = timeout
        self.logger = logger.bind(component=self.sink)
    
    @property
    def enabled(self) -> bool:
        return bool(self.url)
    
    def build_body(self, event: AlertEvent) -> Dict[str, Any]:
        raise NotImplementedError
    
    async def deliver(self, event: AlertEvent) -> DeliveryStatus:
        if not self.enabled:
            return DeliveryStatus.SKIPPED
        
        response = await self.client.post(self.url, json=self.build_body(event), timeout=self.timeout)
        response.raise_for_status()
        self.logger.info("Alert sent", status_code=response.status_code, dna_hash=event.dna_hash)
        return DeliveryStatus.DELIVERED


class ChatWebhookSender(WebhookSender):
    """Chat-ops channel (Mattermost incoming webhook)."""
    
    sink = "mattermost"
    
    def build_body(self, event: AlertEvent) -> Dict[str, Any]:
        return build_chat_message(event)


class AdminWebhookSender(WebhookSender):
    """Admin panel webhook; receives the raw event envelope."""
    
    sink = "admin_webhook"
    
    def build_body(self, event: AlertEvent) -> Dict[str, Any]:
        return event.to_envelope()
