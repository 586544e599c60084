"""
配置模块 - 管理框架配置
Config module - manages framework configuration.
"""

from OneBotHub.config.defaults import VERSION, build_default_config
from OneBotHub.config.manager import ConfigManager

__all__ = ["ConfigManager", "build_default_config", "VERSION"]
