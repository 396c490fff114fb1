"""Fraud signature registry endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status

from web3dna.api.app.dependencies import get_registry
from web3dna.api.schemas import FraudSignatureCreate
from web3dna.database.registry import FraudRegistry
from web3dna.models.alerts import FraudSignature

router = APIRouter()


@router.get("", response_model=List[FraudSignature])
async def list_signatures(registry: FraudRegistry = Depends(get_registry)):
    """All known fraud signatures."""
    return registry.list()


@router.post("", response_model=FraudSignature, status_code=status.HTTP_201_CREATED)
async def add_signature(request: FraudSignatureCreate, registry: FraudRegistry = Depends(get_registry)):
    """Flag a DNA hash as fraudulent."""
    return registry.insert(FraudSignature(**request.model_dump()))
