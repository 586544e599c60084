"""
存储模块 - 插件使用的简单持久化
Store module - simple persistence used by plugins.
"""

from OneBotHub.store.json_store import JsonStore

__all__ = ["JsonStore"]
