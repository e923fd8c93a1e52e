# app/api/v1/notifications.py
"""
Real-time appointment events for dashboards.

Each connection subscribes to the process notifier and receives every
appointment.* event as JSON. Delivery is best-effort: a slow client whose
buffer is full loses events, nothing is replayed on reconnect.
"""
import asyncio
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from app.api.dependencies import user_from_token
from app.config.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.websocket("/ws")
async def appointment_events(websocket: WebSocket, token: str = Query(...)):
    try:
        current_user = user_from_token(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    notifier = websocket.app.state.notifier
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue(maxsize=settings.NOTIFICATION_QUEUE_SIZE)

    def offer(event: dict) -> None:
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"Dropping {event.get('type')} for slow listener {current_user.user_id}")

    # Publishers run in worker threads; hop onto this connection's loop
    unsubscribe = notifier.subscribe(lambda event: loop.call_soon_threadsafe(offer, event))
    await websocket.accept()
    logger.info(f"Listener connected: {current_user.user_id} ({current_user.role.value})")

    try:
        await stream_events(websocket, queue, str(current_user.user_id))
    finally:
        unsubscribe()
        logger.info(f"Listener disconnected: {current_user.user_id}")


async def stream_events(websocket: WebSocket, queue: asyncio.Queue, listener: str) -> None:
    """Send queued events until the client goes away; both pumps stop together."""

    async def forward_events():
        while True:
            event = await queue.get()
            await websocket.send_json(event)

    async def wait_for_disconnect():
        while True:
            await websocket.receive_text()

    sender = asyncio.create_task(forward_events())
    receiver = asyncio.create_task(wait_for_disconnect())
    try:
        done, _ = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning(f"Listener {listener} closed with error: {exc}")
    finally:
        # Also runs when this handler is cancelled on shutdown
        for task in (sender, receiver):
            task.cancel()
        await asyncio.gather(sender, receiver, return_exceptions=True)
