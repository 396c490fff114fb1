"""Live alert websocket and manual alert trigger."""

from fastapi import APIRouter, Depends, WebSocket, status

from web3dna.alerts.fanout import AlertFanout
from web3dna.alerts.subscribers import WebSocketSubscriber
from web3dna.api.app.dependencies import get_fanout
from web3dna.models.alerts import AlertEvent

router = APIRouter()


@router.post("", status_code=status.HTTP_202_ACCEPTED)
async def trigger_alert(event: AlertEvent, fanout: AlertFanout = Depends(get_fanout)):
    """Fan an alert out to all sinks without waiting for delivery."""
    fanout.send_alert(event)
    return {"status": "dispatched", "dna_hash": event.dna_hash}


async def alert_stream(websocket: WebSocket):
    """Admin panels subscribe here; inbound messages are ignored."""
    hub = websocket.app.state.hub
    subscriber = WebSocketSubscriber(websocket)
    # Broadcast skips the subscriber until accept() completes
    hub.add(subscriber)
    try:
        await websocket.accept()
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        hub.discard(subscriber)
