"""
WebSocket канал синхронизации профиля между вкладками.

Каждое подключение - отдельная сессия документа ``profile:<user_id>``.
После сохранения профиля в другой вкладке подключение получает
``document.changed`` с новым значением, если его версия строго новее.
Вкладка-автор (``X-Session-Id`` в ``PUT /profile``) сигнал не получает.
"""

import logging
import uuid
from typing import Any, Dict

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect

from ....core.container import ServiceContainer
from ....events import EventType
from ....models.documents import VersionedDocument
from ....services import DocumentSession

logger = logging.getLogger("supportdesk.api.profile_sync")

router = APIRouter(tags=["profile"])

SNAPSHOT_MESSAGE = "document.snapshot"


def document_message(message_type: str, key: str, document: VersionedDocument) -> Dict[str, Any]:
    return {
        "type": message_type,
        "data": {
            "key": key,
            "version": document.version,
            "value": document.model_dump(mode="json"),
        },
    }


@router.websocket("/ws/profile")
async def profile_websocket(websocket: WebSocket):
    container: ServiceContainer = websocket.app.state.container

    user_id = websocket.headers.get("x-user-id") or websocket.query_params.get("user_id")
    if not user_id:
        logger.warning("Rejected anonymous profile WebSocket connection")
        await websocket.close(code=1008)
        return

    session_id = websocket.query_params.get("session_id") or uuid.uuid4().hex
    await websocket.accept()

    documents = container.profile_document(user_id)

    async def push(document: VersionedDocument):
        await websocket.send_json(
            document_message(EventType.DOCUMENT_CHANGED.value, documents.key, document)
        )

    session = DocumentSession(session_id, documents, container.document_sync, on_adopted=push)

    try:
        snapshot = await session.open()
        await websocket.send_json(document_message(SNAPSHOT_MESSAGE, documents.key, snapshot))
        logger.info(f"[{session_id}] Profile session opened for {documents.key}")

        while True:
            # Правки идут через PUT /profile; цикл держит соединение
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"[{session_id}] Profile WebSocket disconnected")
    except Exception as e:
        logger.error(f"[{session_id}] Profile WS fatal error: {e}", exc_info=True)
    finally:
        session.close()
