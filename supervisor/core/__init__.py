"""
Supervisor Core - 守护线程与监督状态机
"""

from .daemon import DaemonThread, SupervisorDaemon

__all__ = [
    "DaemonThread",
    "SupervisorDaemon",
]
