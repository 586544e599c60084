"""Shared fixtures: raw OneBot payload factories and an in-memory transport."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from OneBotHub.bot import Bot
from OneBotHub.errors import TransportError
from OneBotHub.gateway.base import Transport
from OneBotHub.kernel.filter import FilterPolicy

SELF_ID = 10000
GROUP_ID = 460048859
SENDER_ID = 20000


class FakeTransport(Transport):
    """Transport that records API calls and answers from a response table."""

    def __init__(self) -> None:
        super().__init__()
        self._connected = False
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.responses: dict[str, Any] = {}

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True
        self._generation += 1

    async def close(self) -> None:
        self._connected = False

    async def call(self, action: str, params: Mapping[str, Any] | None = None) -> Any:
        if not self._connected:
            raise TransportError("not connected", action=action)
        params = dict(params or {})
        self.calls.append((action, params))
        response = self.responses.get(action)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response

    def actions(self, action: str) -> list[dict[str, Any]]:
        return [params for name, params in self.calls if name == action]


def text(value: str) -> dict[str, Any]:
    return {"type": "text", "data": {"text": value}}


def at(qq: int | str) -> dict[str, Any]:
    return {"type": "at", "data": {"qq": qq}}


def reply(message_id: int | str) -> dict[str, Any]:
    return {"type": "reply", "data": {"id": message_id}}


def face(face_id: int | str) -> dict[str, Any]:
    return {"type": "face", "data": {"id": face_id}}


def group_message(
    *segments: dict[str, Any],
    group_id: int = GROUP_ID,
    user_id: int = SENDER_ID,
    message_id: int = 1,
    self_id: Any = SELF_ID,
) -> dict[str, Any]:
    return {
        "post_type": "message",
        "message_type": "group",
        "sub_type": "normal",
        "self_id": self_id,
        "user_id": user_id,
        "group_id": group_id,
        "message_id": message_id,
        "time": 1700000000,
        "message": list(segments) or [text("hello")],
        "raw_message": "hello",
        "sender": {"user_id": user_id, "nickname": "alice", "card": "Alice"},
    }


def private_message(*segments: dict[str, Any], sub_type: str = "friend") -> dict[str, Any]:
    payload = {
        "post_type": "message",
        "message_type": "private",
        "sub_type": sub_type,
        "self_id": SELF_ID,
        "user_id": SENDER_ID,
        "message_id": 2,
        "time": 1700000000,
        "message": list(segments) or [text("hi")],
        "raw_message": "hi",
        "sender": {"user_id": SENDER_ID, "nickname": "bob"},
    }
    if sub_type == "group":
        payload["group_id"] = GROUP_ID
    return payload


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def bot(transport: FakeTransport, tmp_path) -> Bot:
    return Bot(
        transport,
        FilterPolicy(allowed_groups=[], prefixes=[".", ". "]),
        data_dir=str(tmp_path / "data"),
    )
