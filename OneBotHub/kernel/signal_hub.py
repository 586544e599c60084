"""
信号中枢 - 基于发布/订阅模式的类型化事件系统
Signal Hub - typed publish/subscribe event system.

调度监督器通过它报告处理器失败，Bot 通过它报告连接生命周期。
The dispatch supervisor reports handler failures through it and the bot
reports its connection lifecycle.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class SignalKind(str, Enum):
    """预定义的信号类型 / Predefined signal kinds."""

    BOT_CONNECTED = "bot.connected"
    BOT_CLOSED = "bot.closed"
    PLUGIN_LOADED = "plugin.loaded"
    HANDLER_FAILED = "handler.failed"


@dataclass
class Signal:
    """
    信号对象 - 在系统中传递的消息载体
    Signal object - the carrier passed to subscribers.
    """

    kind: SignalKind
    payload: Any = None
    source: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


SignalHandler = Callable[[Signal], Any]


class SignalHub:
    """
    信号中枢 - 管理订阅与分发
    Signal hub - manages subscriptions and emission.

    订阅者抛出的异常只记录日志，不会影响其他订阅者。
    Exceptions raised by a subscriber are logged and never reach the others.
    """

    def __init__(self) -> None:
        self._slots: dict[SignalKind, list[SignalHandler]] = {}

    def connect(self, kind: SignalKind, handler: SignalHandler) -> None:
        """连接处理器到信号 / Connect a handler to a signal kind."""
        self._slots.setdefault(kind, []).append(handler)
        logger.debug("已连接处理器 %r 到信号 %s", handler, kind.value)

    async def emit(self, signal: Signal) -> Signal:
        """
        发射信号，依次调用所有订阅者
        Emit a signal, calling every subscriber in subscription order.
        """
        for handler in list(self._slots.get(signal.kind, [])):
            try:
                result = handler(signal)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "信号处理器 %r 处理 %s 时出错", handler, signal.kind.value
                )
        return signal

    async def emit_new(
        self,
        kind: SignalKind,
        payload: Any = None,
        source: str = "",
        **metadata: Any,
    ) -> Signal:
        """
        便捷方法：创建并发射一个新信号
        Convenience: create and emit a new signal.
        """
        return await self.emit(
            Signal(kind=kind, payload=payload, source=source, metadata=metadata)
        )
