"""
默认配置 - 框架的所有默认配置值
Default configuration - all default configuration values of the framework.
"""

from __future__ import annotations

from typing import Any

VERSION = "0.1.0"


def build_default_config() -> dict[str, Any]:
    """
    构建默认配置
    Build the default configuration.
    """
    return {
        # OneBot 正向 WebSocket 连接
        "transport": {
            "host": "127.0.0.1",
            "port": 3001,
            "access_token": "",
            "api_timeout": 30,
        },
        # 准入过滤
        "filter": {
            # 接受的群组：null 表示不接受任何群，[] 表示接受全部
            "groups": [],
            "allow_private": True,
            "allow_temporary": True,
            # 呼叫命令的前缀
            "prefixes": ["."],
        },
        # 分发设置
        "dispatch": {
            # 单个处理器超时（秒），null 表示不限制
            "handler_timeout": None,
            # 关闭时等待在途处理器的时间（秒），超时后取消，null 表示一直等待
            "shutdown_timeout": 10,
        },
        # 要加载的插件（模块路径）
        "plugins": [
            "OneBotHub.plugins.quote:QuotePlugin",
        ],
        # 插件数据根目录
        "data_dir": "data",
        # 日志配置
        "logging": {
            "level": "INFO",
            "file": "data/logs/onebothub.log",
        },
    }
