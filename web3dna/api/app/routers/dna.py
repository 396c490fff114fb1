"""DNA matching, fingerprint and credential endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
import structlog

from web3dna.alerts.fanout import AlertFanout
from web3dna.api.app.dependencies import get_fanout, get_registry, get_settings
from web3dna.api.config.settings import APISettings
from web3dna.api.schemas import (
    CredentialRequest,
    CredentialResponse,
    DNACheckRequest,
    DNACheckResponse,
    FingerprintResponse,
    IdentityRequest,
    IdentityResponse,
)
from web3dna.core.fingerprint import compose_fingerprint, signal_set_from_report
from web3dna.core.identity import generate_identity_signature, generate_web3dna
from web3dna.database.registry import FraudRegistry
from web3dna.models.alerts import AlertEvent, AlertSeverity, FraudSignature
from web3dna.utils.metrics import metrics

router = APIRouter()
logger = structlog.get_logger(__name__)


def build_match_alert(signature: FraudSignature, request: DNACheckRequest,
                      settings: APISettings) -> AlertEvent:
    """Alert for a registry match; critical tags escalate severity."""
    critical_tags = {tag.lower() for tag in settings.critical_tags}
    critical = any(tag.lower() in critical_tags for tag in signature.tags)
    
    if request.risk_score is not None:
        risk_score = request.risk_score
    else:
        risk_score = settings.critical_risk_score if critical else settings.moderate_risk_score
    
    return AlertEvent(
        severity=AlertSeverity.CRITICAL if critical else AlertSeverity.MODERATE,
        wallet=request.wallet,
        risk_score=risk_score,
        platform=request.platform,
        matched_tags=tuple(signature.tags),
        dna_hash=signature.dna_hash,
    )


@router.post("/check", response_model=DNACheckResponse)
async def check_dna(
    request: DNACheckRequest,
    registry: FraudRegistry = Depends(get_registry),
    fanout: AlertFanout = Depends(get_fanout),
    settings: APISettings = Depends(get_settings),
):
    """
    Match a DNA hash against the fraud registry.
    
    A match dispatches a fraud alert to every configured sink; the response
    does not wait for the deliveries.
    """
    signature = registry.lookup(request.dna_hash)
    if signature is None:
        metrics.dna_checks.labels(result="clean").inc()
        return DNACheckResponse(matched=False)
    
    metrics.dna_checks.labels(result="match").inc()
    alert = build_match_alert(signature, request, settings)
    logger.warning("Fraud signature matched",
                  fraud_id=signature.fraud_id,
                  tags=signature.tags,
                  wallet=request.wallet,
                  platform=request.platform)
    
    fanout.send_alert(alert)
    return DNACheckResponse(matched=True, signature=signature, alert=alert)


@router.post("/fingerprint", response_model=FingerprintResponse)
async def recompute_fingerprint(report: Dict[str, Any] = Body(..., description="Raw signals as reported by the page")):
    """Recompute a device fingerprint from reported raw signals."""
    result = compose_fingerprint(signal_set_from_report(report))
    return FingerprintResponse(**result.to_dict())


@router.post("/identity", response_model=IdentityResponse)
async def bind_identity(request: IdentityRequest):
    """Digest asserted identity attributes into an identity hash."""
    identity_hash = generate_identity_signature(
        request.name, request.dob, request.selfie_vector, request.id_number
    )
    return IdentityResponse(identity_hash=identity_hash)


@router.post("/credential", response_model=CredentialResponse)
async def generate_credential(
    request: CredentialRequest,
    settings: APISettings = Depends(get_settings),
):
    """Combine identity hash and device fingerprint into a DNA credential."""
    dna_hash = generate_web3dna(
        request.identity_hash,
        request.device_hash,
        secret=request.secret,
        use_hmac=request.use_hmac,
        require_key=settings.require_hmac_key,
    )
    return CredentialResponse(dna_hash=dna_hash)
