"""
传输层基类 - 与 OneBot 实现通信的抽象接口
Transport base - abstract interface to the OneBot implementation.

传输层负责连接、接收原始事件和发起 API 调用；它不理解消息语义。
The transport connects, receives raw events and performs API calls; it knows
nothing about message semantics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

EventCallback = Callable[[dict[str, Any]], None]


class Transport(ABC):
    """
    传输层抽象基类
    Transport abstract base.

    设计要求：
    1. 每条原始入站事件调用一次所有订阅回调（同步调用，回调不应阻塞）
    2. 每次（重新）连接都使 generation 加一，用于判断回复动作是否过期
    3. API 调用失败时抛出 TransportError
    """

    def __init__(self) -> None:
        self._subscribers: list[EventCallback] = []
        self._generation = 0

    @property
    def generation(self) -> int:
        """连接代数 / Connection generation, bumped on every connect."""
        return self._generation

    @property
    @abstractmethod
    def connected(self) -> bool:
        ...

    def on_event(self, callback: EventCallback) -> None:
        """
        订阅原始入站事件
        Subscribe to raw inbound events.
        """
        self._subscribers.append(callback)

    def publish(self, event: dict[str, Any]) -> None:
        """
        将一条原始事件交给所有订阅者，单个订阅者出错不影响其他订阅者
        Hand one raw event to every subscriber; one failing subscriber does
        not affect the rest.
        """
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("事件订阅者 %r 处理事件出错", callback)

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    async def call(self, action: str, params: Mapping[str, Any] | None = None) -> Any:
        """
        调用一个 OneBot API 并返回其 data 字段
        Call one OneBot API action and return its ``data`` field.
        """
        ...
