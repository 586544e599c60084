"""
准入过滤 - 决定一条消息是否需要被分发
Admission filter - decides whether an envelope is dispatched at all.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from OneBotHub.message.envelope import MessageEnvelope, MessageKind


class FilterPolicy:
    """
    过滤策略 - 群白名单与私聊/临时会话开关
    Filter policy - group allow-list and private/temporary toggles.

    allowed_groups 为 None 表示不接受任何群消息；
    为空集合表示接受所有群消息。两者必须严格区分。
    ``allowed_groups`` of None rejects every group message; an empty set
    accepts every group. The two are not interchangeable.
    """

    def __init__(
        self,
        allowed_groups: Iterable[int] | None = (),
        allow_private: bool = True,
        allow_temporary: bool = True,
        prefixes: Iterable[str] = (".",),
    ) -> None:
        self.allowed_groups = allowed_groups
        self.allow_private = allow_private
        self.allow_temporary = allow_temporary
        self.prefixes = prefixes

    @property
    def allowed_groups(self) -> frozenset[int] | None:
        return self._allowed_groups

    @allowed_groups.setter
    def allowed_groups(self, value: Iterable[int] | None) -> None:
        self._allowed_groups = None if value is None else frozenset(int(g) for g in value)

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self._prefixes

    @prefixes.setter
    def prefixes(self, value: Iterable[str]) -> None:
        if isinstance(value, str):
            value = [value]
        # 保序去重
        prefixes = tuple(dict.fromkeys(value))
        if not prefixes:
            raise ValueError("at least one command prefix is required")
        self._prefixes = prefixes

    @classmethod
    def from_config(cls, section: Mapping[str, Any]) -> FilterPolicy:
        """
        从配置中的 filter 段构建
        Build from the ``filter`` section of the configuration.
        """
        return cls(
            allowed_groups=section.get("groups", []),
            allow_private=bool(section.get("allow_private", True)),
            allow_temporary=bool(section.get("allow_temporary", True)),
            prefixes=section.get("prefixes") or (".",),
        )

    def accepts(self, envelope: MessageEnvelope) -> bool:
        """
        判断信封是否放行（短路，第一个否定生效）
        Whether the envelope is admitted; the first rejecting rule wins.
        """
        kind = envelope.kind
        if kind is MessageKind.GROUP:
            if self._allowed_groups is None:
                return False
            if self._allowed_groups and envelope.group_id not in self._allowed_groups:
                return False
            return True
        if kind is MessageKind.PRIVATE_FRIEND:
            return self.allow_private
        if kind is MessageKind.PRIVATE_TEMPORARY:
            return self.allow_temporary
        return False

    def __repr__(self) -> str:
        groups = None if self._allowed_groups is None else sorted(self._allowed_groups)
        return (
            f"FilterPolicy(allowed_groups={groups}, allow_private={self.allow_private}, "
            f"allow_temporary={self.allow_temporary}, prefixes={list(self._prefixes)})"
        )
