"""
插件基类 - 所有插件的父类
Plugin base - parent of all plugins.
"""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from OneBotHub.bot import Bot
    from OneBotHub.message.envelope import MessageEnvelope

_UNSAFE_PATH_CHARS = re.compile(r"[\s/\\:]+")


class Plugin(ABC):
    """
    插件基类 - 用户插件继承此类并声明唯一的 name
    Plugin base - user plugins inherit from this and declare a unique ``name``.

    生命周期：
    1. 构造（进程内只构造一次）
    2. on_load(bot) - 连接前调用一次
    3. run(bot, envelope) - 每条放行的消息调用一次，可能并发

    run 的并发调用之间不做隔离，插件需自行保护内部状态。
    Concurrent run() calls are not isolated from each other; a plugin guards
    its own state.
    """

    # 插件名（唯一标识，注册后不可修改）
    name: str = ""
    # 描述
    description: str = ""
    # 数据根目录，由 Bot 在注册时设置
    data_root: str = "data"

    _name_locked: bool = False

    def __setattr__(self, key: str, value: Any) -> None:
        if key == "name" and self._name_locked:
            raise AttributeError(f"plugin name {self.name!r} cannot change after registration")
        super().__setattr__(key, value)

    def lock_name(self) -> None:
        """注册表在注册成功后调用 / Called by the registry once registered."""
        object.__setattr__(self, "_name_locked", True)

    @property
    def data_namespace(self) -> str:
        """
        由插件名确定的数据命名空间，不含路径分隔符，也不以点开头
        Data namespace derived from the name; it holds no path separators
        and never starts with a dot, so it cannot leave ``data_root``.
        """
        return _UNSAFE_PATH_CHARS.sub("_", self.name).strip("._")

    @property
    def data_path(self) -> str:
        """插件的数据目录（相对路径） / The plugin's data directory."""
        return os.path.join(self.data_root, self.data_namespace)

    async def on_load(self, bot: Bot) -> None:
        """
        加载时调用 - 可在此处进行初始化
        Called once before the bot connects.
        """

    @abstractmethod
    async def run(self, bot: Bot, envelope: MessageEnvelope) -> None:
        """
        处理一条消息
        Handle one envelope.
        """
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
