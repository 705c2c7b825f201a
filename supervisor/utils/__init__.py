"""
Supervisor 工具模块
"""

from .signal_handler import SignalHandler

__all__ = [
    "SignalHandler",
]
