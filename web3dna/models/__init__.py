"""Data models for Web3DNA."""

from web3dna.models.config import Web3DNAConfig
from web3dna.models.signals import (
    CANONICAL_SEPARATOR,
    SIGNAL_NAMES,
    SIGNAL_ORDER,
    DeviceFingerprint,
    IPRiskResult,
    SignalReading,
    SignalSet,
    SignalStatus,
)
from web3dna.models.alerts import (
    FRAUD_MATCH_EVENT,
    AlertEvent,
    AlertSeverity,
    DeliveryOutcome,
    DeliveryStatus,
    FraudSignature,
)

__all__ = [
    "Web3DNAConfig",
    "CANONICAL_SEPARATOR",
    "SIGNAL_NAMES",
    "SIGNAL_ORDER",
    "DeviceFingerprint",
    "IPRiskResult",
    "SignalReading",
    "SignalSet",
    "SignalStatus",
    "FRAUD_MATCH_EVENT",
    "AlertEvent",
    "AlertSeverity",
    "DeliveryOutcome",
    "DeliveryStatus",
    "FraudSignature",
]
