"""
传输模块 - 与 OneBot 实现通信
Transport module - talks to the OneBot implementation.
"""

from OneBotHub.gateway.api import BotApi
from OneBotHub.gateway.base import Transport
from OneBotHub.gateway.onebot import OneBotTransport

__all__ = ["Transport", "OneBotTransport", "BotApi"]
