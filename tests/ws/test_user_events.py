"""Tests for per-user WebSocket delivery and the Redis bridge."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from collabex.redis_client import user_channel
from collabex.ws.bridge import USER_CHANNEL_PATTERN, PubSubBridge, dispatch_user_message
from collabex.ws.manager import ConnectionManager


def _socket() -> MagicMock:
    ws = MagicMock()
    ws.accept = AsyncMock()
    ws.send_text = AsyncMock()
    return ws


class TestConnectionManager:
    @pytest.mark.asyncio
    async def test_send_reaches_every_connection_of_user(self):
        mgr = ConnectionManager()
        first, second, other = _socket(), _socket(), _socket()
        await mgr.connect(first, "c1", "user-1")
        await mgr.connect(second, "c2", "user-1")
        await mgr.connect(other, "c3", "user-2")

        sent = await mgr.send_to_user_direct("user-1", {"type": "notification"})

        assert sent == 2
        first.send_text.assert_awaited_once_with(json.dumps({"type": "notification"}))
        other.send_text.assert_not_awaited()
        assert mgr.get_stats() == {"total_connections": 3, "unique_users": 2}

    @pytest.mark.asyncio
    async def test_unknown_user_gets_nothing(self):
        assert await ConnectionManager().send_to_user_direct("nobody", {"type": "x"}) == 0

    @pytest.mark.asyncio
    async def test_failed_socket_is_dropped(self):
        mgr = ConnectionManager()
        broken = _socket()
        broken.send_text.side_effect = RuntimeError("closed")
        await mgr.connect(broken, "c1", "user-1")

        assert await mgr.send_to_user_direct("user-1", {"type": "x"}) == 0
        assert mgr.connection_count == 0

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self):
        mgr = ConnectionManager()
        await mgr.connect(_socket(), "c1", "user-1")
        await mgr.disconnect("c1")
        await mgr.disconnect("c1")
        assert mgr.get_stats() == {"total_connections": 0, "unique_users": 0}


class TestDispatch:
    @pytest.mark.asyncio
    async def test_event_is_wrapped_for_the_client(self):
        mgr = ConnectionManager()
        ws = _socket()
        await mgr.connect(ws, "c1", "3f1c")

        data = json.dumps({"event": "message", "data": {"content": "hi"}})
        sent = await dispatch_user_message(mgr, user_channel("3f1c"), data)

        assert sent == 1
        delivered = json.loads(ws.send_text.await_args.args[0])
        assert delivered == {"type": "message", "payload": {"content": "hi"}}

    @pytest.mark.asyncio
    async def test_bytes_payload(self):
        mgr = ConnectionManager()
        await mgr.connect(_socket(), "c1", "u1")
        data = json.dumps({"event": "notification", "data": {}}).encode()
        assert await dispatch_user_message(mgr, "ws:user:u1", data) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", ["not json", "[1, 2]", b"\xff\xfe"])
    async def test_malformed_payload_is_ignored(self, data):
        mgr = ConnectionManager()
        ws = _socket()
        await mgr.connect(ws, "c1", "u1")
        assert await dispatch_user_message(mgr, "ws:user:u1", data) == 0
        ws.send_text.assert_not_awaited()


class TestBridgeLifecycle:
    @pytest.mark.asyncio
    async def test_bridge_forwards_pattern_messages(self):
        """A pmessage on a user channel reaches that user's socket, then the bridge stops."""
        mgr = ConnectionManager()
        ws = _socket()
        await mgr.connect(ws, "c1", "u1")

        mock_pubsub = AsyncMock()
        mock_redis = MagicMock()
        mock_redis.pubsub.return_value = mock_pubsub
        bridge = PubSubBridge(mock_redis, mgr)

        messages = [
            {"type": "psubscribe", "channel": USER_CHANNEL_PATTERN, "data": 1},
            {
                "type": "pmessage",
                "pattern": USER_CHANNEL_PATTERN,
                "channel": "ws:user:u1",
                "data": json.dumps({"event": "notification", "data": {"title": "Hi"}}),
            },
            None,
        ]

        async def fake_get_message(**kwargs):
            if messages:
                return messages.pop(0)
            await bridge.stop()
            return None

        mock_pubsub.get_message = fake_get_message

        await bridge.start()

        mock_pubsub.psubscribe.assert_awaited_once_with(USER_CHANNEL_PATTERN)
        mock_pubsub.punsubscribe.assert_awaited_once()
        ws.send_text.assert_awaited_once()
        assert json.loads(ws.send_text.await_args.args[0])["payload"] == {"title": "Hi"}
