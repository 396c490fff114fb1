"""
Web3DNA

Device fingerprinting and identity binding for Web3 platforms, with a
fraud-signature registry and multi-channel alert fan-out.
"""

__version__ = "1.0.0"
__author__ = "Unmask Protocol Security Team"
__description__ = "Composite device fingerprints, DNA credentials and fraud alerting"

from web3dna.core.fingerprint import FingerprintComposer, collect_device_fingerprint
from web3dna.core.identity import generate_identity_signature, generate_web3dna
from web3dna.core.ip_risk import IPRiskEvaluator
from web3dna.database.registry import FraudRegistry, InMemoryFraudRegistry
from web3dna.alerts.fanout import AlertFanout
from web3dna.models.config import Web3DNAConfig

__all__ = [
    "FingerprintComposer",
    "collect_device_fingerprint",
    "generate_identity_signature",
    "generate_web3dna",
    "IPRiskEvaluator",
    "FraudRegistry",
    "InMemoryFraudRegistry",
    "AlertFanout",
    "Web3DNAConfig",
]
