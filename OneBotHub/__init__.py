"""
OneBotHub - OneBot 消息分发与插件框架
OneBotHub - OneBot message dispatch and plugin framework.
"""

from OneBotHub.bot import Bot
from OneBotHub.config.defaults import VERSION
from OneBotHub.errors import (
    DuplicateOrEmptyName,
    HandlerFailure,
    OneBotHubError,
    PluginLoadError,
    StaleReplyAction,
    TransportError,
)
from OneBotHub.kernel.filter import FilterPolicy
from OneBotHub.message.envelope import MessageEnvelope, MessageKind
from OneBotHub.pack.base import Plugin

__app_name__ = "OneBotHub"
__version__ = VERSION

__all__ = [
    "Bot",
    "FilterPolicy",
    "MessageEnvelope",
    "MessageKind",
    "Plugin",
    "OneBotHubError",
    "DuplicateOrEmptyName",
    "StaleReplyAction",
    "TransportError",
    "PluginLoadError",
    "HandlerFailure",
    "__version__",
]
