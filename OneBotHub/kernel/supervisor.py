"""
调度监督器 - 将一条已放行的消息扇出给所有监听器和插件
Dispatch supervisor - fans one admitted envelope out to every listener and plugin.

每次调用都被包装成独立的受监督任务：失败会被捕获、记录并通过信号中枢报告，
不会影响同一消息的其他处理器，也不会阻塞下一条消息的接收。
Every invocation is wrapped in its own supervised task: failures are caught,
logged and reported through the signal hub, never reaching the other handlers
of the same envelope nor blocking acceptance of the next one.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from OneBotHub.errors import HandlerFailure
from OneBotHub.kernel.signal_hub import SignalHub, SignalKind
from OneBotHub.message.envelope import MessageEnvelope

if TYPE_CHECKING:
    from OneBotHub.bot import Bot

HandlerTask = asyncio.Task[HandlerFailure | None]


def describe_handler(handler: Any) -> str:
    """生成用于日志的处理器标识 / Identity of a handler for logs."""
    name = getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None)
    if name:
        module = getattr(handler, "__module__", None)
        return f"{module}.{name}" if module else name
    return repr(handler)


class DispatchSupervisor:
    """
    调度监督器
    Dispatch supervisor.

    监督器在两次调用之间不保存状态：每轮分发只使用注册表快照和当前信封。
    In-flight 集合仅用于持有任务引用，以便关闭时等待。
    Between calls the supervisor keeps no dispatch state; each round uses a
    snapshot of the registries plus the envelope. The in-flight set only holds
    task references so shutdown can wait for them.
    """

    def __init__(
        self,
        bot: Bot,
        *,
        logger: logging.Logger | None = None,
        signal_hub: SignalHub | None = None,
        handler_timeout: float | None = None,
    ) -> None:
        self._bot = bot
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._signal_hub = signal_hub
        self.handler_timeout = handler_timeout
        self._inflight: set[HandlerTask] = set()

    @property
    def in_flight(self) -> int:
        """尚未完成的处理器任务数 / Number of handler tasks still running."""
        return len(self._inflight)

    def dispatch(self, envelope: MessageEnvelope) -> list[HandlerTask]:
        """
        分发一条消息，立即返回已创建的任务列表
        Dispatch one envelope and return the created tasks without waiting.

        被过滤器拒绝时返回空列表，这不是错误。
        A filter rejection returns an empty list; it is not an error.
        """
        if not self._bot.policy.accepts(envelope):
            self._logger.debug("消息被过滤器拒绝: %s", envelope.summary())
            return []

        loop = asyncio.get_running_loop()
        tasks: list[HandlerTask] = []

        for listener in self._bot.listeners.all():
            name = describe_handler(listener)
            tasks.append(
                self._spawn(
                    loop, "listener", name, envelope,
                    lambda listener=listener: listener(envelope),
                )
            )

        for plugin in self._bot.plugins.all():
            tasks.append(
                self._spawn(
                    loop, "plugin", plugin.name, envelope,
                    lambda plugin=plugin: plugin.run(self._bot, envelope),
                )
            )

        return tasks

    async def drain(self, timeout: float | None = None) -> int:
        """
        等待所有在途任务结束，超时后取消剩余任务
        Wait until every in-flight handler task has finished; once ``timeout``
        expires the remaining tasks are cancelled.

        返回被取消的任务数 / Returns the number of cancelled tasks.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self._inflight:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                break
            await asyncio.wait(list(self._inflight), timeout=remaining)

        leftover = list(self._inflight)
        if not leftover:
            return 0

        self._logger.warning("关闭超时，取消 %d 个仍在运行的处理器", len(leftover))
        for task in leftover:
            task.cancel()
        await asyncio.gather(*leftover, return_exceptions=True)
        return len(leftover)

    def _spawn(
        self,
        loop: asyncio.AbstractEventLoop,
        handler_kind: str,
        handler_name: str,
        envelope: MessageEnvelope,
        invoke: Callable[[], Any],
    ) -> HandlerTask:
        task = loop.create_task(
            self._supervise(handler_kind, handler_name, envelope, invoke),
            name=f"{handler_kind}:{handler_name}",
        )
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _supervise(
        self,
        handler_kind: str,
        handler_name: str,
        envelope: MessageEnvelope,
        invoke: Callable[[], Any],
    ) -> HandlerFailure | None:
        try:
            result = invoke()
            if inspect.isawaitable(result):
                if self.handler_timeout is None:
                    await result
                else:
                    await asyncio.wait_for(result, self.handler_timeout)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            failure = HandlerFailure(
                handler_kind=handler_kind,
                handler_name=handler_name,
                envelope=envelope,
                error=exc,
            )
            self._logger.error(
                "%s %s 处理消息 %s 时出错: %r",
                handler_kind,
                handler_name,
                envelope.summary(),
                exc,
                exc_info=exc,
            )
            if self._signal_hub is not None:
                await self._signal_hub.emit_new(
                    SignalKind.HANDLER_FAILED, payload=failure, source="supervisor"
                )
            return failure
        return None
