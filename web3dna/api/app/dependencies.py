"""Dependencies resolving per-application components."""

from fastapi import HTTPException, Request, status

from web3dna.alerts.fanout import AlertFanout
from web3dna.alerts.subscribers import SubscriberHub
from web3dna.api.config.settings import APISettings
from web3dna.database.registry import FraudRegistry


def _component(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name.replace('_', ' ').capitalize()} not initialized"
        )
    return component


def get_settings(request: Request) -> APISettings:
    """Get application settings."""
    return _component(request, "settings")


def get_registry(request: Request) -> FraudRegistry:
    """Get the fraud signature registry."""
    return _component(request, "registry")


def get_fanout(request: Request) -> AlertFanout:
    """Get the alert fan-out."""
    return _component(request, "fanout")


def get_hub(request: Request) -> SubscriberHub:
    """Get the live subscriber hub."""
    return _component(request, "hub")
