"""
监听器注册表 - 匿名回调式观察者
Listener registry - anonymous callback-style observers.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from OneBotHub.message.envelope import MessageEnvelope

Listener = Callable[[MessageEnvelope], Awaitable[Any] | Any]


class ListenerRegistry:
    """只追加的监听器序列 / Append-only sequence of listeners."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def add(self, callback: Listener) -> None:
        if not callable(callback):
            raise TypeError(f"listener must be callable, got {callback!r}")
        self._listeners.append(callback)

    def all(self) -> tuple[Listener, ...]:
        """本轮分发使用的快照 / Snapshot for one fan-out pass."""
        return tuple(self._listeners)

    def __len__(self) -> int:
        return len(self._listeners)
