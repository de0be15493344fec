"""Tests for the WebSocket chat endpoint."""

import asyncio
import json

import pytest
from fastapi import WebSocketDisconnect

from conftest import USER_EMAIL
from legal_assistant.models.conversation import Conversation, Message, MessageSender
from legal_assistant.services.credentials import credential_missing_message


def _drain_turn(ws):
    """Collect frames up to and including the end marker."""
    frames = []
    while True:
        frame = ws.receive_json()
        frames.append(frame)
        if frame["type"] in ("end", "error"):
            return frames


def test_connect_sends_session_snapshot(client):
    with client.websocket_connect("/api/chat/ws?agent_id=popia") as ws:
        frame = ws.receive_json()
        assert frame["type"] == "session"
        assert frame["agent_id"] == "popia"
        assert frame["state"] == "idle"
        assert frame["conversation_id"] is None
        assert len(frame["messages"]) == 1
        assert frame["messages"][0]["sender"] == "ai"


def test_unknown_agent_on_connect_uses_default(client):
    with client.websocket_connect("/api/chat/ws?agent_id=tax") as ws:
        assert ws.receive_json()["agent_id"] == "rental"


def test_send_message_receives_reply_and_end(configured_client, provider):
    with configured_client.websocket_connect("/api/chat/ws") as ws:
        ws.receive_json()
        ws.send_text("What is reasonable notice?")
        message, end = _drain_turn(ws)

    assert message["type"] == "message"
    assert message["message"]["text"] == "42"
    assert message["message"]["sender"] == "ai"
    assert end["type"] == "end"
    assert end["conversation_id"].startswith("conv-")
    assert provider.api_keys == ["test-key"]


def test_json_message_frame(configured_client):
    with configured_client.websocket_connect("/api/chat/ws") as ws:
        ws.receive_json()
        ws.send_text(json.dumps({"type": "message", "content": "hello"}))
        frames = _drain_turn(ws)
    assert frames[0]["message"]["text"] == "42"


def test_turns_are_saved_to_one_conversation(configured_client, services):
    with configured_client.websocket_connect("/api/chat/ws") as ws:
        ws.receive_json()
        conv_ids = []
        for text in ["first", "second", "third"]:
            ws.send_text(text)
            conv_ids.append(_drain_turn(ws)[-1]["conversation_id"])

    assert len(set(conv_ids)) == 1
    history = asyncio.run(services.history.get_history(USER_EMAIL))
    assert len(history) == 1
    assert history[0].title == "first"
    # Welcome message + 3 user + 3 AI
    assert len(history[0].messages) == 7


def test_missing_api_key_reply_is_not_saved(client, services):
    client.post("/api/users/register", json={"email": USER_EMAIL})
    with client.websocket_connect("/api/chat/ws") as ws:
        ws.receive_json()
        ws.send_text("hello")
        message, end = _drain_turn(ws)

    assert message["message"]["text"] == credential_missing_message("gemini")
    assert end["conversation_id"] is None
    assert asyncio.run(services.history.get_history(USER_EMAIL)) == []


def test_blank_message_is_an_error(configured_client, provider):
    with configured_client.websocket_connect("/api/chat/ws") as ws:
        ws.receive_json()
        ws.send_text(json.dumps({"type": "message", "content": "   "}))
        frame = ws.receive_json()
    assert frame["type"] == "error"
    assert provider.calls == []


def test_new_chat_and_select_agent(configured_client):
    with configured_client.websocket_connect("/api/chat/ws") as ws:
        ws.receive_json()
        ws.send_text("hello")
        _drain_turn(ws)

        ws.send_text(json.dumps({"type": "new_chat"}))
        frame = ws.receive_json()
        assert frame["type"] == "session"
        assert frame["conversation_id"] is None
        assert len(frame["messages"]) == 1

        ws.send_text(json.dumps({"type": "select_agent", "agent_id": "consumer"}))
        frame = ws.receive_json()
        assert frame["agent_id"] == "consumer"

        ws.send_text(json.dumps({"type": "select_agent", "agent_id": "tax"}))
        frame = ws.receive_json()
        assert frame == {"type": "error", "detail": "Unknown agent"}


def test_select_conversation_resumes_history(configured_client, services):
    conversation = Conversation(
        id="conv-7",
        agent_id="popia",
        title="Is an email address personal information?",
        messages=[
            Message(id=1, text="Is an email address personal information?", sender=MessageSender.USER),
            Message(id=2, text="Yes.", sender=MessageSender.AI),
        ],
    )
    asyncio.run(services.history.save_conversation(USER_EMAIL, conversation))

    with configured_client.websocket_connect("/api/chat/ws") as ws:
        ws.receive_json()
        ws.send_text(json.dumps({"type": "select_conversation", "conversation_id": "conv-7"}))
        frame = ws.receive_json()
        assert frame["agent_id"] == "popia"
        assert frame["conversation_id"] == "conv-7"
        assert [m["text"] for m in frame["messages"]] == ["Is an email address personal information?", "Yes."]

        ws.send_text("What about phone numbers?")
        assert _drain_turn(ws)[-1]["conversation_id"] == "conv-7"

        ws.send_text(json.dumps({"type": "select_conversation", "conversation_id": "conv-404"}))
        assert ws.receive_json() == {"type": "error", "detail": "Conversation not found"}

    saved = asyncio.run(services.history.get_conversation(USER_EMAIL, "conv-7"))
    assert len(saved.messages) == 4


def test_unknown_frame_type(client):
    with client.websocket_connect("/api/chat/ws") as ws:
        ws.receive_json()
        ws.send_text(json.dumps({"type": "dance"}))
        assert ws.receive_json()["type"] == "error"


def test_identity_from_query_param(client, services):
    with client.websocket_connect("/api/chat/ws?user=c@d.com", headers={"X-User-Email": ""}) as ws:
        assert ws.receive_json()["type"] == "session"


def test_missing_identity_closes_socket(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/chat/ws", headers={"X-User-Email": ""}) as ws:
            ws.receive_json()


def test_show_panel(client):
    with client.websocket_connect("/api/chat/ws") as ws:
        assert ws.receive_json()["active_panel"] == "chat"

        ws.send_text(json.dumps({"type": "show_panel", "panel": "education"}))
        assert ws.receive_json()["active_panel"] == "education"

        ws.send_text(json.dumps({"type": "show_panel", "panel": "settings"}))
        assert ws.receive_json() == {"type": "error", "detail": "Unknown panel"}

        ws.send_text(json.dumps({"type": "select_agent", "agent_id": "general"}))
        assert ws.receive_json()["active_panel"] == "chat"
