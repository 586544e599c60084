"""
插件系统 - 命名插件、注册表、命令匹配与加载
Plugin system - named plugins, registry, command matching and loading.
"""

from OneBotHub.pack.base import Plugin
from OneBotHub.pack.command import CommandMatcher
from OneBotHub.pack.loader import load_plugin_class, load_plugin_classes
from OneBotHub.pack.registry import PluginRegistry

__all__ = [
    "Plugin",
    "PluginRegistry",
    "CommandMatcher",
    "load_plugin_class",
    "load_plugin_classes",
]
