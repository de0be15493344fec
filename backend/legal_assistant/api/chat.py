import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from legal_assistant.api.dependencies import get_services, read_user_email
from legal_assistant.models.agent import find_agent
from legal_assistant.services.container import Services
from legal_assistant.services.session import ConversationSession, Panel

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket, services: Services = Depends(get_services)):
    user_email = read_user_email(websocket)
    if not user_email:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    agent = find_agent(websocket.query_params.get("agent_id", ""))
    session = services.new_session(user_email, agent=agent)
    await websocket.send_json({"type": "session", **session.snapshot()})

    try:
        while True:
            raw = await websocket.receive_text()

            # Plain text is a chat message; JSON frames carry a type
            try:
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise TypeError
            except (json.JSONDecodeError, TypeError):
                data = {"type": "message", "content": raw}

            await _handle_frame(websocket, session, services, data)

    except WebSocketDisconnect:
        logger.debug(f"Chat socket closed for {user_email}")


async def _handle_frame(
    websocket: WebSocket, session: ConversationSession, services: Services, data: dict
) -> None:
    frame_type = data.get("type", "message")

    if frame_type == "message":
        content = str(data.get("content") or "")
        if not content.strip():
            await websocket.send_json({"type": "error", "detail": "Message cannot be empty"})
            return
        if session.is_busy:
            await websocket.send_json({"type": "error", "detail": "A reply is already pending"})
            return

        ai_message = await session.send_message(content)
        if ai_message is not None:
            await websocket.send_json({"type": "message", "message": ai_message.model_dump(mode="json")})
        # conversation_id stays null when the turn was not saved (e.g. missing API key)
        await websocket.send_json({"type": "end", "conversation_id": session.conversation_id})

    elif frame_type == "new_chat":
        session.new_chat()
        await websocket.send_json({"type": "session", **session.snapshot()})

    elif frame_type == "select_agent":
        agent = find_agent(str(data.get("agent_id") or ""))
        if agent is None:
            await websocket.send_json({"type": "error", "detail": "Unknown agent"})
            return
        session.select_agent(agent)
        await websocket.send_json({"type": "session", **session.snapshot()})

    elif frame_type == "select_conversation":
        conversation = await services.history.get_conversation(
            session.user_email, str(data.get("conversation_id") or "")
        )
        if conversation is None:
            await websocket.send_json({"type": "error", "detail": "Conversation not found"})
            return
        session.select_conversation(conversation)
        await websocket.send_json({"type": "session", **session.snapshot()})

    elif frame_type == "show_panel":
        try:
            panel = Panel(data.get("panel"))
        except ValueError:
            await websocket.send_json({"type": "error", "detail": "Unknown panel"})
            return
        session.show_panel(panel)
        await websocket.send_json({"type": "session", **session.snapshot()})

    else:
        await websocket.send_json({"type": "error", "detail": f"Unknown frame type: {frame_type}"})
