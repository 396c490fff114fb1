"""Fingerprinting, hashing and identity binding."""

from web3dna.core.hashing import digest, keyed_digest
from web3dna.core.collectors import SignalCollectors
from web3dna.core.ip_risk import IPRiskEvaluator, assess_ip_risk
from web3dna.core.fingerprint import FingerprintComposer, collect_device_fingerprint, compose_fingerprint
from web3dna.core.identity import generate_identity_signature, generate_web3dna

__all__ = [
    "digest",
    "keyed_digest",
    "SignalCollectors",
    "IPRiskEvaluator",
    "assess_ip_risk",
    "FingerprintComposer",
    "collect_device_fingerprint",
    "compose_fingerprint",
    "generate_identity_signature",
    "generate_web3dna",
]
