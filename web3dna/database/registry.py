"""Fraud signature registry interface and in-process implementation."""

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

import structlog

from web3dna.core.exceptions import DuplicateFraudIdError
from web3dna.models.alerts import FraudSignature

logger = structlog.get_logger(__name__)


def generate_fraud_id() -> str:
    return f"fraud-{uuid.uuid4().hex[:8]}"


class FraudRegistry(ABC):
    """
    Append-only store of known-bad DNA hashes.
    
    Implementations make each insertion atomic; no update or delete
    operation is offered.
    """
    
    @abstractmethod
    def lookup(self, dna_hash: str) -> Optional[FraudSignature]:
        """Return the earliest signature recorded for ``dna_hash``, if any."""
    
    @abstractmethod
    def insert(self, signature: FraudSignature) -> FraudSignature:
        """
        Store a signature, assigning ``fraud_id`` when absent. Returns the stored copy.
        
        Raises ``DuplicateFraudIdError`` when an explicit ``fraud_id`` is already stored.
        """
    
    @abstractmethod
    def list(self) -> List[FraudSignature]:
        """Snapshot of all signatures; the caller owns the returned list."""
    
    def test_connection(self) -> bool:
        """Whether the backing store is reachable."""
        return True


class InMemoryFraudRegistry(FraudRegistry):
    """Lock-guarded list, for tests and single-process deployments."""
    
    def __init__(self, seed: Optional[Iterable[FraudSignature]] = None,
                 id_factory: Callable[[], str] = generate_fraud_id):
        self._lock = threading.Lock()
        self._signatures: List[FraudSignature] = []
        self._id_factory = id_factory
        self.logger = logger.bind(component="in_memory_registry")
        
        for signature in seed or ():
            self.insert(signature)
    
    def _next_id(self) -> str:
        taken = {signature.fraud_id for signature in self._signatures}
        fraud_id = self._id_factory()
        while fraud_id in taken:
            fraud_id = self._id_factory()
        return fraud_id
    
    def lookup(self, dna_hash: str) -> Optional[FraudSignature]:
        with self._lock:
            for signature in self._signatures:
                if signature.dna_hash == dna_hash:
                    return signature.model_copy(deep=True)
        return None
    
    def insert(self, signature: FraudSignature) -> FraudSignature:
        with self._lock:
            if signature.fraud_id and any(s.fraud_id == signature.fraud_id for s in self._signatures):
                raise DuplicateFraudIdError(signature.fraud_id)
            stored = signature.model_copy(deep=True, update={
                "fraud_id": signature.fraud_id or self._next_id(),
                "added_at": datetime.now(timezone.utc),
            })
            self._signatures.append(stored)
        
        self.logger.info("Fraud signature added",
                        fraud_id=stored.fraud_id,
                        tags=stored.tags,
                        source=stored.source)
        return stored.model_copy(deep=True)
    
    def list(self) -> List[FraudSignature]:
        with self._lock:
            return [signature.model_copy(deep=True) for signature in self._signatures]
