"""
插件加载器 - 从配置中的模块路径导入插件类
Plugin loader - imports plugin classes from module paths listed in configuration.

路径格式为 ``package.module:ClassName``，省略类名时取模块中定义的第一个 Plugin 子类。
Paths look like ``package.module:ClassName``; without a class name the first
Plugin subclass defined in the module is used.
"""

from __future__ import annotations

import importlib
import inspect
import logging

from OneBotHub.errors import PluginLoadError
from OneBotHub.pack.base import Plugin

logger = logging.getLogger(__name__)


def load_plugin_class(path: str) -> type[Plugin]:
    """
    按路径导入插件类
    Import a plugin class by path.
    """
    module_name, _, class_name = path.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise PluginLoadError(f"无法导入插件模块 {module_name!r}: {exc}", path=path) from exc

    if class_name:
        plugin_cls = getattr(module, class_name, None)
    else:
        plugin_cls = None
        for _, attr in inspect.getmembers(module, inspect.isclass):
            if (
                issubclass(attr, Plugin)
                and attr is not Plugin
                and attr.__module__ == module.__name__
                and not inspect.isabstract(attr)
            ):
                plugin_cls = attr
                break

    if not (isinstance(plugin_cls, type) and issubclass(plugin_cls, Plugin)):
        raise PluginLoadError(f"{path!r} 中未找到 Plugin 子类", path=path)

    logger.debug("已导入插件类 %s", plugin_cls.__qualname__)
    return plugin_cls


def load_plugin_classes(paths: list[str]) -> list[type[Plugin]]:
    return [load_plugin_class(path) for path in paths]
