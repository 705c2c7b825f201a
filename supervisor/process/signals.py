"""
Signal Dispatcher - 进程信号发送

职责：
- 将 PAUSE / RESUME / TERMINATE 映射为具体的平台原语
- 容忍已经退出的目标进程（报告错误，不崩溃）
- 对一组 PID 并发发送信号，单个失败不影响其它 PID
"""

import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Optional

from loguru import logger

from core.enums import SignalKind
from core.exceptions import SignalDeliveryException

DEFAULT_MAX_WORKERS = 32


class SignalBackend(ABC):
    """
    进程控制能力接口

    Tree Controller 只依赖该接口，其它平台可以提供不同实现
    """

    @abstractmethod
    def pause(self, pid: int) -> None:
        pass

    @abstractmethod
    def resume(self, pid: int) -> None:
        pass

    @abstractmethod
    def terminate(self, pid: int) -> None:
        pass

    @abstractmethod
    def exists(self, pid: int) -> bool:
        pass

    def send(self, pid: int, kind: SignalKind) -> None:
        """按信号种类分派到对应方法"""
        if kind == SignalKind.PAUSE:
            self.pause(pid)
        elif kind == SignalKind.RESUME:
            self.resume(pid)
        elif kind == SignalKind.TERMINATE:
            self.terminate(pid)
        else:
            raise ValueError(f"Unknown signal kind: {kind}")


class PosixSignalBackend(SignalBackend):
    """POSIX 实现：SIGTSTP / SIGCONT / SIGTERM"""

    def pause(self, pid: int) -> None:
        os.kill(pid, SignalKind.PAUSE.signum)

    def resume(self, pid: int) -> None:
        os.kill(pid, SignalKind.RESUME.signum)

    def terminate(self, pid: int) -> None:
        os.kill(pid, SignalKind.TERMINATE.signum)

    def exists(self, pid: int) -> bool:
        try:
            # 发送信号 0 检查进程是否存在（不会真正发送信号）
            os.kill(pid, 0)
            return True
        except PermissionError:
            # 进程存在，但属于其他用户
            return True
        except OSError:
            return False


class SignalDispatcher:
    """
    信号分发器

    使用示例:
        dispatcher = SignalDispatcher()
        dispatcher.signal(pid, SignalKind.PAUSE)
        failures = dispatcher.signal_many(children, SignalKind.PAUSE)
    """

    def __init__(
        self,
        backend: Optional[SignalBackend] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.backend = backend or PosixSignalBackend()
        self.max_workers = max_workers

    def signal(self, pid: int, kind: SignalKind) -> None:
        """
        向单个进程发送信号

        Args:
            pid: 进程ID，0 视为已结束，直接返回
            kind: 信号种类

        Raises:
            SignalDeliveryException: 发送失败（例如进程已退出）
        """
        if pid == 0:
            logger.debug(f"No process to {kind.value.lower()}, already stopped")
            return

        try:
            self.backend.send(pid, kind)
        except ProcessLookupError as e:
            logger.debug(f"Process {pid} already exited, {kind.value} not delivered")
            raise SignalDeliveryException(pid, kind.value, "no such process") from e
        except OSError as e:
            logger.error(f"Failed to send {kind.value} to process {pid}: {e}")
            raise SignalDeliveryException(pid, kind.value, str(e)) from e

        logger.debug(f"Sent {kind.value} to process {pid}")

    def signal_many(
        self, pids: Iterable[int], kind: SignalKind
    ) -> Dict[int, Optional[Exception]]:
        """
        并发向一组进程发送信号，等待全部完成

        单个 PID 的失败只记录日志，不会中断其它 PID 的发送

        Args:
            pids: 进程ID列表
            kind: 信号种类

        Returns:
            {pid: None 表示成功，否则为异常}
        """
        targets = list(dict.fromkeys(pid for pid in pids if pid))
        if not targets:
            return {}

        workers = min(self.max_workers, len(targets))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="signal") as pool:
            futures = {pid: pool.submit(self._deliver, pid, kind) for pid in targets}
            results = {pid: future.result() for pid, future in futures.items()}

        failed = [pid for pid, error in results.items() if error is not None]
        if failed:
            logger.warning(
                f"{kind.value} not delivered to {len(failed)}/{len(targets)} processes: {failed}"
            )
        return results

    def pid_exists(self, pid: int) -> bool:
        """检查进程是否存在，0 视为不存在"""
        if pid == 0:
            return False
        return self.backend.exists(pid)

    def _deliver(self, pid: int, kind: SignalKind) -> Optional[Exception]:
        # 工作线程只读取 PID 并返回结果，不修改共享状态
        try:
            self.signal(pid, kind)
            return None
        except SignalDeliveryException as e:
            return e
        except Exception as e:
            logger.error(f"Unexpected error sending {kind.value} to process {pid}: {e}")
            return e
