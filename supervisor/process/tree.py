"""
Tree Controller - 进程树暂停 / 恢复 / 终止

状态（state）和后代快照（children）只在这里修改，且只由控制循环线程调用；
并发的信号任务只读取 PID 并返回结果。
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from loguru import logger

from core.enums import ProcessState, SignalKind
from core.exceptions import DiscoveryException, SignalDeliveryException
from core.models import SupervisedProcess

from .discovery import DescendantDiscoverer
from .signals import SignalDispatcher


class TreeController:
    """
    进程树控制器

    使用示例:
        controller = TreeController()
        controller.stop_tree(process)    # 根进程与全部后代 SIGTSTP
        controller.resume_tree(process)  # 根进程与记录的后代 SIGCONT
        controller.kill_root(process)    # 仅根进程 SIGTERM
    """

    def __init__(
        self,
        dispatcher: Optional[SignalDispatcher] = None,
        discoverer: Optional[DescendantDiscoverer] = None,
        rediscover_on_resume: bool = True,
    ):
        """
        Args:
            dispatcher: 信号分发器（可选，用于依赖注入）
            discoverer: 后代发现器（可选，用于依赖注入）
            rediscover_on_resume: 恢复时是否重新发现后代并与记录的快照合并
        """
        self.dispatcher = dispatcher or SignalDispatcher()
        self.discoverer = discoverer or DescendantDiscoverer()
        self.rediscover_on_resume = rediscover_on_resume

    def root_exists(self, process: SupervisedProcess) -> bool:
        """根进程是否仍然存在"""
        return self.dispatcher.pid_exists(process.pid)

    def stop_tree(self, process: SupervisedProcess) -> None:
        """
        暂停进程树

        根进程暂停与后代发现并行进行；根进程信号成功后立即切换到 STOPPED，
        所有后代信号发送完成后才返回。

        Raises:
            SignalDeliveryException: 根进程暂停失败（状态不变，已暂停的后代会被恢复）
            DiscoveryException: 无法获取进程快照（根进程保持暂停，快照不变）
        """
        if process.pid == 0:
            logger.debug("No process to stop")
            return
        if process.state == ProcessState.STOPPED:
            logger.debug(f"Process {process.pid} already stopped")
            return

        root = process.pid
        root_error: Optional[SignalDeliveryException] = None

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="stop-tree") as pool:
            descendants_future = pool.submit(self._pause_descendants, root)

            try:
                self.dispatcher.signal(root, SignalKind.PAUSE)
                process.state = ProcessState.STOPPED
                logger.debug(f"Process {root} paused, waiting for descendants")
            except SignalDeliveryException as e:
                root_error = e

            # 等待后代发现与暂停完成
            try:
                descendants, results = descendants_future.result()
                discovery_error = None
            except DiscoveryException as e:
                descendants, results = [], {}
                discovery_error = e

        if root_error is not None:
            paused = [pid for pid, error in results.items() if error is None]
            if paused:
                logger.warning(
                    f"Root {root} could not be paused, resuming {len(paused)} descendants"
                )
                self.dispatcher.signal_many(paused, SignalKind.RESUME)
            raise root_error

        if discovery_error is not None:
            logger.error(f"Failed to get descendants of {root}: {discovery_error}")
            raise discovery_error

        process.children = descendants
        logger.info(f"⏸️  Process {root} stopped ({len(descendants)} descendants)")

    def resume_tree(self, process: SupervisedProcess) -> None:
        """
        恢复进程树

        先恢复根进程，再并发恢复记录的后代快照（可选合并一次新的发现结果）。

        Raises:
            SignalDeliveryException: 根进程恢复失败（状态保持 STOPPED）
        """
        if process.pid == 0:
            logger.debug("No process to resume")
            return
        if process.state == ProcessState.RUNNING:
            logger.debug(f"Process {process.pid} already running")
            return

        root = process.pid
        targets = self._resume_targets(process)

        self.dispatcher.signal(root, SignalKind.RESUME)
        process.state = ProcessState.RUNNING

        self.dispatcher.signal_many(targets, SignalKind.RESUME)
        process.children = targets
        logger.info(f"▶️  Process {root} resumed ({len(targets)} descendants)")

    def kill_root(self, process: SupervisedProcess) -> None:
        """
        终止根进程（不级联到后代，不改变状态）

        只发送 SIGTERM：暂停中的根进程在默认处理下同样会被终止，
        捕获了 SIGTERM 的根进程保持暂停，直到检查再次通过。

        Raises:
            SignalDeliveryException: 终止信号发送失败
        """
        if process.pid == 0:
            logger.debug("No process to terminate")
            return

        self.dispatcher.signal(process.pid, SignalKind.TERMINATE)
        logger.info(f"🛑 Process {process.pid} terminated")

    def thaw_descendants(self, process: SupervisedProcess) -> None:
        """
        根进程已不存在时，恢复记录的后代快照

        后代不会随根进程退出，若不恢复会一直保持暂停。
        """
        if not process.children:
            return
        logger.info(f"Resuming {len(process.children)} descendants of {process.pid}")
        self.dispatcher.signal_many(process.children, SignalKind.RESUME)

    def _pause_descendants(self, root: int) -> Tuple[List[int], Dict[int, Optional[Exception]]]:
        descendants = self.discoverer.discover(root)
        for child in descendants:
            logger.debug(f"Stopping child process {child}")
        results = self.dispatcher.signal_many(descendants, SignalKind.PAUSE)
        return descendants, results

    def _resume_targets(self, process: SupervisedProcess) -> List[int]:
        targets = list(process.children)
        if not self.rediscover_on_resume:
            return targets

        try:
            fresh = self.discoverer.discover(process.pid)
        except DiscoveryException as e:
            logger.warning(f"Rediscovery of {process.pid} failed, using last snapshot: {e}")
            return targets

        known = set(targets)
        added = [pid for pid in fresh if pid not in known]
        if added:
            logger.debug(f"Descendants spawned since stop: {added}")
        return targets + added
