"""
WebSocket канал кураторов.

Подключение подписывается на канал кураторов и получает события
record.created / record.updated / record.deleted в виде JSON.
"""

import logging
import uuid

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect

from ....core.container import ServiceContainer
from ....models.records import Role

logger = logging.getLogger("supportdesk.api.curators")

router = APIRouter(tags=["curators"])


@router.websocket("/ws/curators")
async def curators_websocket(websocket: WebSocket):
    container: ServiceContainer = websocket.app.state.container

    role = websocket.headers.get("x-user-role") or websocket.query_params.get("role")
    if role != Role.CURATOR.value:
        logger.warning("Rejected non-curator WebSocket connection")
        await websocket.close(code=1008)
        return

    connection_id = f"{websocket.headers.get('x-user-id', 'curator')}:{uuid.uuid4().hex[:8]}"
    await websocket.accept()
    await container.curator_connections.connect(connection_id, websocket)

    try:
        while True:
            # Входящие сообщения не используются; цикл держит соединение
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"[{connection_id}] WebSocket disconnected")
    except Exception as e:
        logger.error(f"[{connection_id}] WS fatal error: {e}", exc_info=True)
    finally:
        await container.curator_connections.disconnect(connection_id)
