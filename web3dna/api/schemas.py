"""Request and response schemas for the Web3DNA API."""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field

from web3dna.models.alerts import AlertEvent, FraudSignature


class DNACheckRequest(BaseModel):
    """DNA hash to match against the fraud registry."""
    dna_hash: str = Field(..., min_length=1, description="DNA credential to check")
    wallet: Optional[str] = Field(default=None, description="Wallet address of the visitor")
    platform: Optional[str] = Field(default=None, description="Reporting platform")
    risk_score: Optional[int] = Field(default=None, ge=0, le=100, description="Override risk score")


class DNACheckResponse(BaseModel):
    """Registry match result."""
    matched: bool = Field(..., description="Whether the DNA hash is a known fraud signature")
    signature: Optional[FraudSignature] = Field(default=None, description="Matched signature")
    alert: Optional[AlertEvent] = Field(default=None, description="Alert dispatched for the match")


class FingerprintResponse(BaseModel):
    """Fingerprint recomputed from reported signals."""
    fingerprint: str = Field(..., description="Device fingerprint digest")
    rawSignals: Dict[str, Any] = Field(..., description="Signals in canonical order")


class IdentityRequest(BaseModel):
    """Asserted identity attributes, validated by the caller."""
    name: str = Field(..., description="Full name")
    dob: str = Field(..., description="Date of birth")
    selfie_vector: Union[List[float], str] = Field(..., description="Face embedding")
    id_number: str = Field(..., description="Identity document number")


class IdentityResponse(BaseModel):
    identity_hash: str


class CredentialRequest(BaseModel):
    """Inputs for a DNA credential."""
    identity_hash: str = Field(..., min_length=1, description="Identity hash")
    device_hash: str = Field(..., min_length=1, description="Device fingerprint")
    secret: str = Field(default="", description="Shared secret")
    use_hmac: bool = Field(default=False, description="Produce a keyed credential")


class CredentialResponse(BaseModel):
    dna_hash: str


class FraudSignatureCreate(BaseModel):
    """New fraud signature; the registry assigns an id when none is given."""
    fraud_id: Optional[str] = Field(default=None, description="Signature id")
    dna_hash: str = Field(..., min_length=1, description="Flagged DNA credential")
    tags: List[str] = Field(default_factory=list, description="Risk tags")
    source: Optional[str] = Field(default=None, description="Who flagged the signature")
