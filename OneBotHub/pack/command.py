"""
命令匹配 - 检查消息是否调用了某个命令
Command matching - checks whether an envelope invokes a command.
"""

from __future__ import annotations

from collections.abc import Iterable

from OneBotHub.message.components import TextSegment
from OneBotHub.message.envelope import MessageEnvelope


class CommandMatcher:
    """
    命令匹配器
    Command matcher.

    只检查第一个文本段：文本中包含任意 "前缀 + 命令" 子串即为匹配，区分大小写。
    之后的文本段不会被检查。
    Only the first text segment is examined: it matches when it contains any
    ``prefix + command`` as a substring, case-sensitively. Later text segments
    are never looked at.
    """

    def __init__(self, prefixes: Iterable[str]) -> None:
        self._prefixes = tuple(prefixes)

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self._prefixes

    def candidates(self, command: str | Iterable[str]) -> list[str]:
        """前缀与命令的笛卡尔积 / Cartesian product of prefixes and commands."""
        commands = [command] if isinstance(command, str) else list(command)
        return [prefix + cmd for prefix in self._prefixes for cmd in commands]

    def matches(
        self,
        envelope: MessageEnvelope,
        command: str | Iterable[str],
        require_mention: bool = False,
    ) -> bool:
        if require_mention and not envelope.is_at_self:
            return False

        for segment in envelope.segments:
            if isinstance(segment, TextSegment):
                text = segment.text
                return any(candidate in text for candidate in self.candidates(command))
        return False
