"""Tests for FinishNotifier broadcast and client bookkeeping."""

from unittest.mock import AsyncMock

import pytest

from event_countdown.services.notifier import FinishNotifier


def _ws(fail: bool = False) -> AsyncMock:
    ws = AsyncMock()
    if fail:
        ws.send_json.side_effect = RuntimeError("socket closed")
    return ws


class TestClients:
    @pytest.mark.asyncio
    async def test_connect_accepts_and_tracks(self) -> None:
        notifier = FinishNotifier()
        ws = _ws()
        await notifier.connect(ws)
        ws.accept.assert_awaited_once()
        assert notifier.client_count == 1

        await notifier.disconnect(ws)
        assert notifier.client_count == 0

    @pytest.mark.asyncio
    async def test_disconnect_unknown_client(self) -> None:
        notifier = FinishNotifier()
        await notifier.disconnect(_ws())
        assert notifier.client_count == 0


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_sends_to_every_client(self) -> None:
        notifier = FinishNotifier()
        a, b = _ws(), _ws()
        await notifier.connect(a)
        await notifier.connect(b)

        await notifier.broadcast({"type": "countdown_started", "countdown_id": "x"})
        a.send_json.assert_awaited_once()
        b.send_json.assert_awaited_once()
        assert a.send_json.call_args.args[0]["countdown_id"] == "x"
        assert notifier.sent_count == 1

    @pytest.mark.asyncio
    async def test_dead_clients_pruned(self) -> None:
        notifier = FinishNotifier()
        alive, dead = _ws(), _ws(fail=True)
        await notifier.connect(alive)
        await notifier.connect(dead)

        await notifier.broadcast({"type": "countdown_started"})
        assert notifier.client_count == 1

        await notifier.broadcast({"type": "countdown_started"})
        assert alive.send_json.await_count == 2
        assert dead.send_json.await_count == 1


class TestNotify:
    @pytest.mark.asyncio
    async def test_notify_schedules_broadcast(self) -> None:
        notifier = FinishNotifier()
        ws = _ws()
        await notifier.connect(ws)

        notifier.notify("abc", "launch", "2026-01-01T12:00:00+00:00")
        await notifier.drain()

        payload = ws.send_json.call_args.args[0]
        assert payload["type"] == "countdown_started"
        assert payload["countdown_id"] == "abc"
        assert payload["label"] == "launch"
        assert payload["start_time"] == "2026-01-01T12:00:00+00:00"
        assert "fired_at" in payload

    def test_notify_without_loop_is_dropped(self) -> None:
        notifier = FinishNotifier()
        notifier.notify("abc", "", "2026-01-01T12:00:00+00:00")
        assert notifier.sent_count == 0
