"""WebSocket endpoint: streams "countdown started" notifications to the UI."""

from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from event_countdown.services.notifier import FinishNotifier


def create_notifications_router(notifier: FinishNotifier) -> APIRouter:
    """Factory that creates the notification WebSocket endpoint."""

    router = APIRouter()

    @router.websocket("/ws/notifications")
    async def notifications_ws(websocket: WebSocket) -> None:
        await notifier.connect(websocket)
        try:
            # Notifications are pushed server-side; the client only pings.
            while True:
                data = await websocket.receive_text()
                if data.strip().lower() == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            await notifier.disconnect(websocket)

    return router
