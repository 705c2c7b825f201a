"""
Descendant Discovery - 进程树后代发现

对同一份进程快照做逐层广度优先展开：
- 每次调用只取一次快照，遍历过程中不会重新取快照
- 每层的子进程查找由固定大小的线程池并行完成
- 一层的所有结果收齐之后才进入下一层
- checked 集合保证同一 PID 不会被重复入队
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from loguru import logger

from .snapshot import (
    ProcessEntry,
    ProcessSnapshotProvider,
    PsutilSnapshotProvider,
    children_of,
)

DEFAULT_MAX_WORKERS = 10


class DescendantDiscoverer:
    """
    进程树后代发现器

    使用示例:
        discoverer = DescendantDiscoverer()
        descendants = discoverer.discover(pid)
    """

    def __init__(
        self,
        provider: Optional[ProcessSnapshotProvider] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """
        Args:
            provider: 进程快照提供者（默认使用 psutil）
            max_workers: 每层并行查找的最大线程数
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got: {max_workers}")
        self.provider = provider or PsutilSnapshotProvider()
        self.max_workers = max_workers

    def discover(self, root_pid: int) -> List[int]:
        """
        发现 root_pid 的全部后代

        Args:
            root_pid: 根进程ID，0 表示没有进程

        Returns:
            后代 PID 列表，按广度优先发现顺序排列，不含重复项也不含根进程

        Raises:
            DiscoveryException: 无法获取进程快照
        """
        if root_pid == 0:
            logger.debug("No root process, skipping discovery")
            return []

        snapshot = self.provider.snapshot()

        checked = {root_pid}
        descendants: List[int] = []
        level = self._unchecked(children_of(snapshot, root_pid), checked)
        depth = 0

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="discovery"
        ) as pool:
            while level:
                descendants.extend(level)
                logger.trace(f"Discovery level {depth} of {root_pid}: {level}")

                futures = [pool.submit(self._lookup, snapshot, pid) for pid in level]
                # 层屏障：本层的每个批次都取回后才继续
                batches = [future.result() for future in futures]

                next_level: List[int] = []
                for batch in batches:
                    next_level.extend(self._unchecked(batch, checked))
                level = next_level
                depth += 1

        logger.debug(f"Discovered {len(descendants)} descendants of {root_pid}")
        return descendants

    @staticmethod
    def _lookup(snapshot: List[ProcessEntry], pid: int) -> List[int]:
        return children_of(snapshot, pid)

    @staticmethod
    def _unchecked(pids: List[int], checked: set) -> List[int]:
        """过滤已访问的 PID，并把新 PID 记入 checked"""
        fresh = []
        for pid in pids:
            if pid in checked:
                continue
            checked.add(pid)
            fresh.append(pid)
        return fresh
