"""
错误类型 - 框架对外暴露的异常与失败记录
Error types - exceptions and failure records exposed by the framework.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from OneBotHub.message.envelope import MessageEnvelope


class OneBotHubError(Exception):
    def __init__(
        self, code: str, message: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details


class DuplicateOrEmptyName(OneBotHubError):
    """插件名为空或重复 / Plugin name is empty or already registered."""

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__("duplicate_or_empty_name", message, {"name": name})
        self.name = name


class StaleReplyAction(OneBotHubError):
    """回复动作所属的会话已失效 / The session behind a reply action is gone."""

    def __init__(self, message: str = "reply action is no longer valid") -> None:
        super().__init__("stale_reply_action", message)


class TransportError(OneBotHubError):
    """
    传输层错误 - 连接失败或 API 调用失败
    Transport error - connection failure or failed API call.
    """

    def __init__(
        self,
        message: str,
        action: str = "",
        retcode: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__("transport_error", message, details)
        self.action = action
        self.retcode = retcode


class PluginLoadError(OneBotHubError):
    def __init__(self, message: str, path: str = "") -> None:
        super().__init__("plugin_load_error", message, {"path": path})
        self.path = path


@dataclass(frozen=True)
class HandlerFailure:
    """
    处理器失败记录 - 由调度监督器捕获，不会向外抛出
    Handler failure record - captured by the dispatch supervisor, never raised.
    """

    # "listener" 或 "plugin"
    handler_kind: str
    handler_name: str
    envelope: MessageEnvelope
    error: BaseException

    def __str__(self) -> str:
        return (
            f"{self.handler_kind} {self.handler_name!r} failed on "
            f"{self.envelope.summary()}: {self.error!r}"
        )
