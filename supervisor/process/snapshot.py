"""
Process Snapshot - 系统进程快照

提供 {pid, ppid} 列表的能力接口，后代发现只依赖该接口
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, NamedTuple

import psutil
from loguru import logger

from core.exceptions import DiscoveryException


class ProcessEntry(NamedTuple):
    """快照中的一条进程记录"""

    pid: int
    ppid: int


class ProcessSnapshotProvider(ABC):
    """进程快照提供者基类"""

    @abstractmethod
    def snapshot(self) -> List[ProcessEntry]:
        """
        获取调用时刻所有进程及其父进程

        Returns:
            ProcessEntry 列表

        Raises:
            DiscoveryException: 无法获取快照
        """
        pass


class PsutilSnapshotProvider(ProcessSnapshotProvider):
    """基于 psutil 的快照实现"""

    def snapshot(self) -> List[ProcessEntry]:
        entries: List[ProcessEntry] = []
        try:
            for proc in psutil.process_iter(["pid", "ppid"]):
                info = proc.info
                ppid = info.get("ppid")
                # 迭代过程中退出或无权限读取的进程没有 ppid
                if ppid is None:
                    continue
                entries.append(ProcessEntry(info["pid"], ppid))
        except (psutil.Error, OSError) as e:
            logger.error(f"Failed to snapshot processes: {e}")
            raise DiscoveryException(str(e)) from e

        logger.trace(f"Process snapshot: {len(entries)} entries")
        return entries


class StaticSnapshotProvider(ProcessSnapshotProvider):
    """
    固定快照

    用于回放已知的进程表（例如测试或离线分析）
    """

    def __init__(self, entries: Iterable[tuple]):
        self.entries = [ProcessEntry(int(pid), int(ppid)) for pid, ppid in entries]

    def snapshot(self) -> List[ProcessEntry]:
        return list(self.entries)


def children_of(snapshot: List[ProcessEntry], pid: int) -> List[int]:
    """
    在快照中查找直接子进程

    Args:
        snapshot: 进程快照
        pid: 父进程ID

    Returns:
        子进程ID列表（没有子进程时为空列表）
    """
    if pid == 0:
        return []
    return [entry.pid for entry in snapshot if entry.ppid == pid and entry.pid != pid]
