"""
消息模型模块 - 消息段与消息信封
Message model module - segments and the message envelope.
"""

from OneBotHub.message.components import (
    FaceSegment,
    ImageSegment,
    MentionSegment,
    ReplySegment,
    Segment,
    TextSegment,
    UnknownSegment,
    build_message,
    parse_cq_message,
    parse_message,
    parse_segment,
)
from OneBotHub.message.envelope import MessageEnvelope, MessageKind, ReplyAction

__all__ = [
    "Segment",
    "TextSegment",
    "MentionSegment",
    "ReplySegment",
    "FaceSegment",
    "ImageSegment",
    "UnknownSegment",
    "parse_segment",
    "parse_cq_message",
    "parse_message",
    "build_message",
    "MessageEnvelope",
    "MessageKind",
    "ReplyAction",
]
