"""
插件注册表 - 按名称保存单例插件实例
Plugin registry - holds named singleton plugin instances.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from OneBotHub.errors import DuplicateOrEmptyName
from OneBotHub.pack.base import Plugin

logger = logging.getLogger(__name__)


class PluginRegistry:
    """
    插件注册表 - 插件名必须非空且唯一
    Plugin registry - names must be non-empty and unique.
    """

    def __init__(self) -> None:
        # 已注册的插件: name -> Plugin
        self._plugins: dict[str, Plugin] = {}

    def register(self, plugin: Plugin) -> Plugin:
        """
        注册插件，名称为空或重复时抛出 DuplicateOrEmptyName
        Register a plugin; raises DuplicateOrEmptyName on empty or duplicate names.
        """
        name = getattr(plugin, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise DuplicateOrEmptyName(
                f"{type(plugin).__name__} 的插件 name 不能为空 / plugin name must not be empty",
                name=name if isinstance(name, str) else None,
            )
        if not plugin.data_namespace:
            raise DuplicateOrEmptyName(
                f"插件名 {name!r} 无法生成数据目录 / plugin name {name!r} yields no data namespace",
                name=name,
            )
        if name in self._plugins:
            raise DuplicateOrEmptyName(
                f"插件 {name!r} 已注册 / plugin {name!r} is already registered",
                name=name,
            )

        plugin.lock_name()
        self._plugins[name] = plugin
        logger.info("已注册插件: %s (%s)", name, type(plugin).__name__)
        return plugin

    def get(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def all(self) -> tuple[Plugin, ...]:
        """
        当前插件的快照，之后的注册不会影响它
        Snapshot of the current plugins; later registrations do not affect it.
        """
        return tuple(self._plugins.values())

    def names(self) -> list[str]:
        return list(self._plugins)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[Plugin]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._plugins)
