"""Alert, fraud signature and delivery outcome models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


FRAUD_MATCH_EVENT = "FRAUD_MATCH"


class AlertSeverity(str, Enum):
    """Alert severity levels."""
    INFO = "info"
    MODERATE = "moderate"
    CRITICAL = "critical"


class AlertEvent(BaseModel):
    """A fraud match, fanned out unchanged to every sink."""
    severity: AlertSeverity = Field(..., description="Alert severity")
    wallet: Optional[str] = Field(default=None, description="Wallet address involved, if known")
    risk_score: int = Field(..., ge=0, le=100, description="Risk score 0-100")
    platform: Optional[str] = Field(default=None, description="Platform that reported the match")
    matched_tags: Tuple[str, ...] = Field(default=(), description="Tags of the matched fraud signature, in order")
    dna_hash: str = Field(..., description="Matched DNA credential")
    
    class Config:
        frozen = True
    
    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready event body."""
        return self.model_dump(mode="json")
    
    def to_envelope(self) -> Dict[str, Any]:
        """Event body tagged with the event type, as sent to subscribers and the admin webhook."""
        return {"event": FRAUD_MATCH_EVENT, **self.to_payload()}


class FraudSignature(BaseModel):
    """A known-bad DNA hash and its risk tags."""
    fraud_id: Optional[str] = Field(default=None, description="Registry-assigned id when absent")
    dna_hash: str = Field(..., min_length=1, description="Flagged DNA credential")
    tags: List[str] = Field(default_factory=list, description="Risk tags")
    source: Optional[str] = Field(default=None, description="Who flagged the signature")
    added_at: Optional[datetime] = Field(default=None, description="Insertion time (UTC)")


class DeliveryStatus(str, Enum):
    """Per-sink delivery result."""
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of one sink delivery, kept for observability only."""
    sink: str
    status: DeliveryStatus
    dna_hash: str
    detail: Optional[str] = None
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
