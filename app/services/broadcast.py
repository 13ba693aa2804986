#app/services/broadcast.py
"""
BroadcastHub — рассылка событий всем открытым WebSocket-подписчикам.

Доставка at-most-once: закрытый подписчик пропускается, ошибка отправки
логируется и подписчик удаляется. publish() никогда не бросает исключений,
поэтому не может сломать мутацию, которая его вызвала.
"""
import json
import logging
from typing import Any, Set

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from starlette.websockets import WebSocketState

logger = logging.getLogger("OCB.Broadcast")

TASK_CREATED = "task:created"
TASK_UPDATED = "task:updated"
TASK_DELETED = "task:deleted"


def _is_open(ws: Any) -> bool:
    return (
        getattr(ws, "client_state", None) == WebSocketState.CONNECTED
        and getattr(ws, "application_state", None) == WebSocketState.CONNECTED
    )


class BroadcastHub:
    """
    Реестр подписчиков. Создаётся корнем приложения (app.state.hub) и
    передаётся в хендлеры через зависимость get_hub.
    """

    def __init__(self):
        self._subscribers: Set[WebSocket] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def register(self, ws: WebSocket) -> None:
        self._subscribers.add(ws)
        logger.info(f"WebSocket client connected ({len(self._subscribers)} total)")

    def unregister(self, ws: WebSocket) -> None:
        if ws in self._subscribers:
            self._subscribers.discard(ws)
            logger.info(f"WebSocket client disconnected ({len(self._subscribers)} total)")

    async def publish(self, event: str, data: Any) -> int:
        """
        Отправляет {"event": ..., "data": ...} всем открытым подписчикам.
        Возвращает число успешных доставок.
        """
        try:
            message = json.dumps({"event": event, "data": jsonable_encoder(data)})
        except (TypeError, ValueError) as e:
            logger.error(f"Could not serialize '{event}' event: {e}")
            return 0

        delivered = 0
        # копия: подписчики могут отвалиться во время рассылки
        for ws in list(self._subscribers):
            if not _is_open(ws):
                continue
            try:
                await ws.send_text(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping WebSocket subscriber after send error: {e}")
                self.unregister(ws)
        logger.debug(f"Broadcast '{event}' to {delivered} subscriber(s)")
        return delivered

    async def shutdown(self) -> None:
        for ws in list(self._subscribers):
            if _is_open(ws):
                try:
                    await ws.close()
                except Exception as e:
                    logger.warning(f"Error closing WebSocket subscriber: {e}")
        self._subscribers.clear()
        logger.info("Broadcast hub stopped")
