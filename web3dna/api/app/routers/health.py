"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from web3dna.alerts.fanout import AlertFanout
from web3dna.api.app.dependencies import get_fanout, get_registry
from web3dna.database.registry import FraudRegistry

router = APIRouter()


@router.get("/health")
async def health(
    request: Request,
    registry: FraudRegistry = Depends(get_registry),
    fanout: AlertFanout = Depends(get_fanout),
):
    """Service health and sink configuration."""
    startup_time = getattr(request.app.state, "startup_time", None)
    registry_connected = registry.test_connection()
    return {
        "status": "healthy" if registry_connected else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "startup_time": startup_time.isoformat() if startup_time else None,
        "registry": type(registry).__name__,
        "registry_connected": registry_connected,
        "live_subscribers": len(fanout.hub),
        "pending_deliveries": fanout.pending,
        "sinks": {
            "websocket": True,
            "mattermost": fanout.chat.enabled,
            "admin_webhook": fanout.admin.enabled,
        },
    }
