"""
消息段 - OneBot 消息中可以包含的各种元素
Message segments - the typed units that make up a OneBot message.

每个消息段都是带标签的变体：``type`` 为标签，``data`` 为载荷映射。
Every segment is a tagged variant: ``type`` is the tag, ``data`` the payload.
所有消息段继承自 Segment，使用 Pydantic v2 进行校验，构造后不可变。
All segments inherit from Segment, validated with Pydantic v2, frozen once built.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def to_id(value: Any) -> int | None:
    """
    将平台给出的 ID 规范化为整数，缺失或非法时返回 None
    Normalize a platform id to int, None when absent or malformed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value.lstrip("-").isdigit():
            return int(value)
    return None


class Segment(BaseModel):
    """
    消息段基类
    Base message segment.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    def to_plain_text(self) -> str:
        """转为纯文本表示 / Convert to plain text representation."""
        return ""

    def to_wire(self) -> dict[str, Any]:
        """转为 OneBot 数组格式的单个元素 / Convert to one OneBot array element."""
        return {"type": self.type, "data": dict(self.data)}


class TextSegment(Segment):
    """纯文本 / Plain text."""

    type: Literal["text"] = "text"

    @classmethod
    def of(cls, text: str) -> TextSegment:
        return cls(data={"text": text})

    @property
    def text(self) -> str:
        return str(self.data.get("text", ""))

    def to_plain_text(self) -> str:
        return self.text


class MentionSegment(Segment):
    """@提及 / At-mention."""

    type: Literal["at"] = "at"

    @classmethod
    def of(cls, user_id: int | str) -> MentionSegment:
        return cls(data={"qq": str(user_id)})

    @property
    def target(self) -> str:
        # 平台可能给出数字或字符串，统一为字符串比较
        return str(self.data.get("qq", ""))

    @property
    def is_all(self) -> bool:
        return self.target == "all"

    def to_plain_text(self) -> str:
        return f"@{self.data.get('name') or self.target}"


class ReplySegment(Segment):
    """回复引用 / Quoted reply."""

    type: Literal["reply"] = "reply"

    @classmethod
    def of(cls, message_id: int | str) -> ReplySegment:
        return cls(data={"id": str(message_id)})

    @property
    def message_id(self) -> int | None:
        return to_id(self.data.get("id"))


class FaceSegment(Segment):
    """QQ 表情 / QQ face emoji."""

    type: Literal["face"] = "face"

    @classmethod
    def of(cls, face_id: int | str) -> FaceSegment:
        return cls(data={"id": str(face_id)})

    @property
    def face_id(self) -> str:
        return str(self.data.get("id", ""))

    def to_plain_text(self) -> str:
        return f"[face:{self.face_id}]"


class ImageSegment(Segment):
    """图片 / Image."""

    type: Literal["image"] = "image"

    @classmethod
    def of(cls, file: str) -> ImageSegment:
        return cls(data={"file": file})

    @property
    def url(self) -> str:
        return str(self.data.get("url") or self.data.get("file") or "")

    def to_plain_text(self) -> str:
        return "[image]"


class UnknownSegment(Segment):
    """未建模的消息段，原样保留 / Segment kinds not modelled here, kept as-is."""


SEGMENT_TYPES: dict[str, type[Segment]] = {
    "text": TextSegment,
    "at": MentionSegment,
    "reply": ReplySegment,
    "face": FaceSegment,
    "image": ImageSegment,
}


def parse_segment(raw: Segment | Mapping[str, Any]) -> Segment:
    """
    解析单个原始消息段
    Parse one raw message segment.
    """
    if isinstance(raw, Segment):
        return raw
    seg_type = str(raw.get("type", ""))
    seg_data = raw.get("data") or {}
    cls = SEGMENT_TYPES.get(seg_type, UnknownSegment)
    return cls(type=seg_type, data=dict(seg_data))


# [CQ:type,key=value,...]
_CQ_CODE = re.compile(r"\[CQ:([A-Za-z0-9_.-]+)((?:,[^\]]*)?)\]")


def _cq_unescape(text: str, in_param: bool = False) -> str:
    if in_param:
        text = text.replace("&#44;", ",")
    return text.replace("&#91;", "[").replace("&#93;", "]").replace("&amp;", "&")


def parse_cq_message(message: str) -> tuple[Segment, ...]:
    """
    解析字符串格式（CQ 码）的 OneBot 消息
    Parse a string-form OneBot message, decoding its CQ codes.

    CQ 码之间的文本成为文本段，转义字符会被还原。
    Text between CQ codes becomes text segments, with escapes decoded.
    """
    segments: list[Segment] = []
    pos = 0
    for match in _CQ_CODE.finditer(message):
        if match.start() > pos:
            segments.append(TextSegment.of(_cq_unescape(message[pos : match.start()])))
        data = {}
        for pair in match.group(2).split(",")[1:]:
            key, _, value = pair.partition("=")
            if key:
                data[key] = _cq_unescape(value, in_param=True)
        segments.append(parse_segment({"type": match.group(1), "data": data}))
        pos = match.end()
    if pos < len(message):
        segments.append(TextSegment.of(_cq_unescape(message[pos:])))
    return tuple(segments)


def parse_message(message: Any) -> tuple[Segment, ...]:
    """
    解析 OneBot 消息（数组格式或字符串格式）为消息段元组
    Parse a OneBot message (array or string form) into a tuple of segments.
    """
    if message is None:
        return ()
    if isinstance(message, str):
        return parse_cq_message(message)
    segments = []
    for item in message:
        if isinstance(item, (Segment, Mapping)):
            segments.append(parse_segment(item))
    return tuple(segments)


MessageContent = str | Segment | Mapping[str, Any] | Iterable[Any]


def build_message(content: MessageContent) -> list[dict[str, Any]]:
    """
    将待发送内容转换为 OneBot 数组格式
    Convert outgoing content to the OneBot array format.

    接受字符串、单个消息段，或它们（以及原始字典）组成的列表。
    Accepts a string, a single segment, or a list of those (and raw dicts).
    """
    if isinstance(content, str):
        return [TextSegment.of(content).to_wire()]
    if isinstance(content, Segment):
        return [content.to_wire()]
    if isinstance(content, Mapping):
        return [parse_segment(content).to_wire()]

    result = []
    for item in content:
        if isinstance(item, str):
            result.append(TextSegment.of(item).to_wire())
        elif isinstance(item, (Segment, Mapping)):
            result.append(parse_segment(item).to_wire())
        else:
            result.append(TextSegment.of(str(item)).to_wire())
    return result
