"""Fraud alert delivery."""

from web3dna.alerts.fanout import AlertFanout
from web3dna.alerts.subscribers import LiveSubscriber, SubscriberHub, WebSocketSubscriber
from web3dna.alerts.webhooks import AdminWebhookSender, ChatWebhookSender, build_chat_message

__all__ = [
    "AlertFanout",
    "LiveSubscriber",
    "SubscriberHub",
    "WebSocketSubscriber",
    "AdminWebhookSender",
    "ChatWebhookSender",
    "build_chat_message",
]
