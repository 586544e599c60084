"""
消息信封 - 将一条原始入站事件规范化为只读视图
Message envelope - normalizes one raw inbound event into a read-only view.

信封是不可变的输入描述，插件和监听器只读取它。
The envelope is an immutable description of the input; handlers only read it.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from OneBotHub.errors import StaleReplyAction
from OneBotHub.message.components import (
    MentionSegment,
    MessageContent,
    ReplySegment,
    Segment,
    TextSegment,
    build_message,
    parse_message,
    to_id,
)

if TYPE_CHECKING:
    from OneBotHub.gateway.base import Transport


class MessageKind(str, Enum):
    """消息类型 / Message kind."""

    GROUP = "group"
    PRIVATE_FRIEND = "private-friend"
    PRIVATE_TEMPORARY = "private-temporary"
    # 其他组合，过滤器永远不会放行
    OTHER = "other"

    @classmethod
    def classify(cls, message_type: Any, sub_type: Any) -> MessageKind:
        """
        由 message_type 与 sub_type 推导消息类型
        Derive the kind from the raw message_type and sub_type fields.
        """
        if message_type == "group":
            return cls.GROUP
        if message_type == "private":
            if sub_type == "friend":
                return cls.PRIVATE_FRIEND
            if sub_type == "group":
                return cls.PRIVATE_TEMPORARY
        return cls.OTHER


class ReplyAction:
    """
    回复动作 - 绑定到投递该事件的传输会话
    Reply action - bound to the transport session that delivered the event.

    传输断开或重连后再调用会抛出 StaleReplyAction。
    Calling it after the transport closed or reconnected raises StaleReplyAction.
    """

    def __init__(self, transport: Transport, event: Mapping[str, Any]) -> None:
        self._transport = transport
        self._event = event
        self._generation = transport.generation

    @property
    def is_valid(self) -> bool:
        return (
            self._transport.connected
            and self._transport.generation == self._generation
        )

    async def __call__(
        self, content: MessageContent, mention_sender: bool = False
    ) -> None:
        if not self.is_valid:
            raise StaleReplyAction(
                "the session that delivered this message is no longer connected"
            )
        await self._transport.call(
            ".handle_quick_operation",
            {
                "context": dict(self._event),
                "operation": {
                    "reply": build_message(content),
                    "at_sender": mention_sender,
                },
            },
        )


@dataclass(frozen=True)
class MessageEnvelope:
    """
    消息信封 - 一条入站聊天事件的规范化视图
    Message envelope - normalized view of one inbound chat event.
    """

    # 消息类型，构造时确定
    kind: MessageKind
    # 机器人自身 QQ 号
    self_id: int | None = None
    # 发送者 QQ 号
    sender_id: int | None = None
    # 群号，仅群消息存在
    group_id: int | None = None
    # 消息段（不可变元组）
    segments: tuple[Segment, ...] = ()
    # 扁平化文本
    raw_text: str = ""
    message_id: int | None = None
    time: int | None = None
    message_type: str | None = None
    sub_type: str | None = None
    sender_name: str | None = None
    sender_card: str | None = None
    # 原始载荷（只读副本）
    raw: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}), repr=False, compare=False
    )
    reply_action: ReplyAction | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_raw(
        cls,
        payload: Mapping[str, Any],
        reply_action: ReplyAction | None = None,
    ) -> MessageEnvelope:
        """
        从原始 OneBot 消息事件构建信封
        Build an envelope from a raw OneBot message event.
        """
        data = copy.deepcopy(dict(payload))
        message_type = data.get("message_type") or None
        sub_type = data.get("sub_type") or None
        kind = MessageKind.classify(message_type, sub_type)
        sender = data.get("sender") or {}
        if not isinstance(sender, Mapping):
            sender = {}

        return cls(
            kind=kind,
            self_id=to_id(data.get("self_id")),
            sender_id=to_id(data.get("user_id")),
            group_id=to_id(data.get("group_id")) if kind is MessageKind.GROUP else None,
            segments=parse_message(data.get("message")),
            raw_text=data.get("raw_message") or "",
            message_id=to_id(data.get("message_id")),
            time=to_id(data.get("time")),
            message_type=message_type,
            sub_type=sub_type,
            sender_name=sender.get("nickname") or None,
            sender_card=sender.get("card") or None,
            raw=MappingProxyType(data),
            reply_action=reply_action,
        )

    @property
    def is_group(self) -> bool:
        return self.kind is MessageKind.GROUP

    @property
    def is_private(self) -> bool:
        return self.kind is MessageKind.PRIVATE_FRIEND

    @property
    def is_temporary(self) -> bool:
        return self.kind is MessageKind.PRIVATE_TEMPORARY

    @property
    def is_at_self(self) -> bool:
        """
        是否 @ 了机器人自己（按字符串比较，兼容数字与字符串 ID）
        Whether the bot itself is mentioned (compared as strings).
        """
        if self.self_id is None:
            return False
        self_id = str(self.self_id)
        for segment in self.segments:
            if isinstance(segment, MentionSegment) and segment.target == self_id:
                return True
        return False

    @property
    def reply_target_id(self) -> int | None:
        """被引用消息的 ID / Id of the first quoted message, if any."""
        for segment in self.segments:
            if isinstance(segment, ReplySegment):
                return segment.message_id
        return None

    @property
    def first_text(self) -> str | None:
        """第一个文本段的内容 / Text of the first text segment."""
        for segment in self.segments:
            if isinstance(segment, TextSegment):
                return segment.text
        return None

    @property
    def plain_text(self) -> str:
        return "".join(s.to_plain_text() for s in self.segments)

    async def reply(
        self, content: MessageContent, mention_sender: bool = False
    ) -> None:
        """
        回复这条消息
        Reply to this message.
        """
        if self.reply_action is None:
            raise StaleReplyAction("no reply action is bound to this message")
        await self.reply_action(content, mention_sender)

    def summary(self) -> str:
        """用于日志的一行摘要 / One-line summary for logs."""
        return (
            f"<{self.kind.value} group={self.group_id} "
            f"sender={self.sender_id} message={self.message_id}>"
        )
