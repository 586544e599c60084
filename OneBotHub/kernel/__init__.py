"""
分发内核 - 准入过滤、监听器注册表、信号中枢与调度监督器
Dispatch kernel - admission filter, listener registry, signal hub and supervisor.
"""

from OneBotHub.kernel.filter import FilterPolicy
from OneBotHub.kernel.listeners import ListenerRegistry
from OneBotHub.kernel.signal_hub import Signal, SignalHub, SignalKind
from OneBotHub.kernel.supervisor import DispatchSupervisor

__all__ = [
    "FilterPolicy",
    "ListenerRegistry",
    "Signal",
    "SignalHub",
    "SignalKind",
    "DispatchSupervisor",
]
