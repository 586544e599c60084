"""
机器人 - 聚合根，持有过滤策略、插件、监听器和传输层
Bot - aggregate root owning the filter policy, plugins, listeners and transport.

数据流：
原始事件 -> MessageEnvelope -> FilterPolicy -> DispatchSupervisor -> 监听器 / 插件
Data flow:
raw event -> MessageEnvelope -> FilterPolicy -> DispatchSupervisor -> listeners / plugins
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import Iterable
from typing import Any

from OneBotHub.config.manager import ConfigManager
from OneBotHub.gateway.api import BotApi
from OneBotHub.gateway.base import Transport
from OneBotHub.gateway.onebot import OneBotTransport
from OneBotHub.kernel.filter import FilterPolicy
from OneBotHub.kernel.listeners import Listener, ListenerRegistry
from OneBotHub.kernel.signal_hub import SignalHub, SignalKind
from OneBotHub.kernel.supervisor import DispatchSupervisor, HandlerTask
from OneBotHub.message.components import MessageContent
from OneBotHub.message.envelope import MessageEnvelope, ReplyAction
from OneBotHub.pack.base import Plugin
from OneBotHub.pack.command import CommandMatcher
from OneBotHub.pack.loader import load_plugin_class
from OneBotHub.pack.registry import PluginRegistry


class Bot:
    """
    机器人实例
    Bot instance.

    策略字段是普通的可变配置，修改对之后到达的消息生效，不与在途分发同步。
    Policy fields are plain mutable configuration; changes apply to envelopes
    arriving afterwards and are not synchronized with in-flight dispatch.
    """

    def __init__(
        self,
        transport: Transport,
        policy: FilterPolicy | None = None,
        *,
        logger: logging.Logger | None = None,
        signal_hub: SignalHub | None = None,
        handler_timeout: float | None = None,
        shutdown_timeout: float | None = 10.0,
        data_dir: str = "data",
    ) -> None:
        self._transport = transport
        self.policy = policy or FilterPolicy()
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self.signal_hub = signal_hub or SignalHub()
        self.data_dir = data_dir
        # 关闭时等待在途处理器的最长时间（秒），None 表示一直等待
        self.shutdown_timeout = shutdown_timeout
        # 由 from_config 设置，插件可以读取
        self.config: ConfigManager | None = None
        self.plugins = PluginRegistry()
        self.listeners = ListenerRegistry()
        self.api = BotApi(transport)
        self.supervisor = DispatchSupervisor(
            self,
            logger=self._logger,
            signal_hub=self.signal_hub,
            handler_timeout=handler_timeout,
        )
        self._loaded: set[str] = set()
        self._shutdown_event = asyncio.Event()
        transport.on_event(self.handle_event)

    @classmethod
    def from_config(
        cls,
        config: ConfigManager,
        transport: Transport | None = None,
        logger: logging.Logger | None = None,
    ) -> Bot:
        """
        按配置构建机器人并注册配置中的插件
        Build a bot from configuration and register the configured plugins.
        """
        if transport is None:
            transport = OneBotTransport(
                host=config.get("transport.host", "127.0.0.1"),
                port=int(config.get("transport.port", 3001)),
                access_token=config.get("transport.access_token", "") or "",
                api_timeout=float(config.get("transport.api_timeout", 30)),
            )
        bot = cls(
            transport,
            FilterPolicy.from_config(config.get("filter", {}) or {}),
            logger=logger,
            handler_timeout=config.get("dispatch.handler_timeout"),
            shutdown_timeout=config.get("dispatch.shutdown_timeout", 10.0),
            data_dir=config.get("data_dir", "data"),
        )
        bot.config = config
        for path in config.get("plugins", []) or []:
            bot.load_plugin(load_plugin_class(path))
        return bot

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self.policy.prefixes

    @property
    def accepted_groups(self) -> frozenset[int] | None:
        """接受的群组，None 表示不接受，空集合表示接受全部 / None: no groups; empty: all."""
        return self.policy.allowed_groups

    # ---- 注册 / registration ----

    def add_listener(self, listener: Listener) -> None:
        """
        添加消息监听器
        Add a message listener.
        """
        self.listeners.add(listener)

    def load_plugin(self, plugin: type[Plugin] | Plugin) -> Plugin:
        """
        加载插件：传入插件类时在此实例化
        Load a plugin; a plugin class is instantiated here.
        """
        instance = plugin() if isinstance(plugin, type) else plugin
        instance.data_root = self.data_dir
        return self.plugins.register(instance)

    def check_command(
        self,
        envelope: MessageEnvelope,
        command: str | Iterable[str],
        require_mention: bool = False,
    ) -> bool:
        """
        检查消息是否包含命令
        Check whether the envelope invokes a command under the current prefixes.
        """
        return CommandMatcher(self.policy.prefixes).matches(
            envelope, command, require_mention
        )

    async def send(
        self, content: MessageContent, target_id: int, is_group: bool = True
    ) -> int | None:
        return await self.api.send_message(content, target_id, is_group)

    # ---- 事件 / events ----

    def handle_event(self, event: dict[str, Any]) -> list[HandlerTask]:
        """
        处理一条原始事件（传输层回调），只分发消息事件
        Handle one raw transport event; only message events are dispatched.
        """
        if event.get("post_type") != "message":
            return []
        envelope = MessageEnvelope.from_raw(
            event, reply_action=ReplyAction(self._transport, event)
        )
        return self.supervisor.dispatch(envelope)

    # ---- 生命周期 / lifecycle ----

    async def setup(self) -> None:
        """
        对尚未初始化的插件调用 on_load
        Await ``on_load`` for every plugin not yet set up.
        """
        for plugin in self.plugins.all():
            if plugin.name in self._loaded:
                continue
            await plugin.on_load(self)
            self._loaded.add(plugin.name)
            await self.signal_hub.emit_new(
                SignalKind.PLUGIN_LOADED, payload=plugin, source="bot"
            )

    async def connect(self) -> None:
        """
        初始化插件并连接
        Set up plugins and connect the transport.
        """
        await self.setup()
        await self._transport.connect()
        self._logger.info(
            "成功连接到 OneBot，已加载 %d 个插件: %s",
            len(self.plugins),
            ", ".join(self.plugins.names()) or "-",
        )
        await self.signal_hub.emit_new(SignalKind.BOT_CONNECTED, source="bot")

    async def close(self) -> None:
        """
        等待在途处理器结束并关闭传输层，超过 shutdown_timeout 的处理器会被取消
        Wait for in-flight handlers and close the transport; handlers still
        running after ``shutdown_timeout`` are cancelled.
        """
        await self.supervisor.drain(self.shutdown_timeout)
        await self._transport.close()
        await self.signal_hub.emit_new(SignalKind.BOT_CLOSED, source="bot")
        self._logger.info("机器人已关闭")

    def stop(self) -> None:
        self._shutdown_event.set()

    async def run_forever(self) -> None:
        """
        连接并持续运行直到收到关闭信号
        Connect and run until a shutdown signal is received.
        """
        loop = asyncio.get_running_loop()
        if sys.platform != "win32":
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self.stop)

        await self.connect()
        try:
            await self._shutdown_event.wait()
        finally:
            # 恢复默认信号处理，关闭期间再次 Ctrl+C 可以直接退出
            if sys.platform != "win32":
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.remove_signal_handler(sig)
            await self.close()
