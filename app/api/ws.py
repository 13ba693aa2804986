#app/api/ws.py
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.core.settings import settings

logger = logging.getLogger("OCB.WebSocket")

router = APIRouter(tags=["Realtime"])

@router.websocket(settings.WS_PATH)
async def board_updates(websocket: WebSocket):
    """
    Канал push-обновлений доски: task:created / task:updated / task:deleted.
    Входящие сообщения читаются и игнорируются.
    """
    hub = websocket.app.state.hub
    # регистрация до accept, чтобы не пропустить события сразу после подключения
    hub.register(websocket)
    try:
        await websocket.accept()
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("WebSocket client closed the connection")
    finally:
        hub.unregister(websocket)
