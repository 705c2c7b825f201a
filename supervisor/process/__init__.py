"""
Process Module - 进程树管理模块

职责：
- 系统进程快照
- 后代进程发现
- 信号发送
- 进程树暂停 / 恢复 / 终止
"""

from .discovery import DescendantDiscoverer
from .signals import PosixSignalBackend, SignalBackend, SignalDispatcher
from .snapshot import (
    ProcessEntry,
    ProcessSnapshotProvider,
    PsutilSnapshotProvider,
    StaticSnapshotProvider,
    children_of,
)
from .tree import TreeController

__all__ = [
    "DescendantDiscoverer",
    "PosixSignalBackend",
    "SignalBackend",
    "SignalDispatcher",
    "ProcessEntry",
    "ProcessSnapshotProvider",
    "PsutilSnapshotProvider",
    "StaticSnapshotProvider",
    "children_of",
    "TreeController",
]
