"""Fraud signature registries."""

from web3dna.database.registry import FraudRegistry, InMemoryFraudRegistry, generate_fraud_id
from web3dna.database.sql_registry import SqlFraudRegistry

__all__ = [
    "FraudRegistry",
    "InMemoryFraudRegistry",
    "SqlFraudRegistry",
    "generate_fraud_id",
]
