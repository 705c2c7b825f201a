"""
守护线程基类和健康检查守护进程
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from loguru import logger

from core.enums import ProcessState
from core.exceptions import MFException
from core.models import CheckOutcome, CheckResult, SupervisedProcess
from core.utils.time_utils import format_duration

from supervisor.monitoring import HealthChecker
from supervisor.process import TreeController


class DaemonThread(threading.Thread, ABC):
    """
    守护线程基类

    提供标准的守护线程功能：
    - 启动/停止控制（等待可被 stop() 打断）
    - 每轮工作前的延迟和每轮之间的间隔
    - do_work() 返回 False 时结束循环
    - 上下文管理器支持
    """

    def __init__(
        self,
        name: str,
        check_interval: float = 5.0,
        check_delay: float = 0.0,
        join_timeout: float = 10.0,
    ) -> None:
        """
        初始化守护线程

        Args:
            name: 线程名称
            check_interval: 每轮工作之后的等待时间（秒）
            check_delay: 每轮工作之前的等待时间（秒）
            join_timeout: 上下文退出时等待线程结束的时间（秒）
        """
        super().__init__(daemon=True, name=name)
        self.check_interval = check_interval
        self.check_delay = check_delay
        self.join_timeout = join_timeout
        self._stop_event = threading.Event()
        self._daemon_started = False

    def __enter__(self) -> "DaemonThread":
        """上下文管理器入口"""
        self.start()
        self._daemon_started = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """上下文管理器出口"""
        if self._daemon_started:
            self.stop()
            self.join(timeout=self.join_timeout)
        return False

    @abstractmethod
    def do_work(self) -> Optional[bool]:
        """
        执行实际工作（子类实现）

        Returns:
            False 表示循环应当结束
        """
        pass

    def run(self) -> None:
        """主循环"""
        logger.debug(f"🚀 {self.name} started")

        while not self._stop_event.is_set():
            if self._stop_event.wait(self.check_delay):
                break

            try:
                if self.do_work() is False:
                    break
            except Exception as e:
                logger.exception(f"❌ {self.name} error: {e}")

            # 等待下一次检查
            self._stop_event.wait(self.check_interval)

        logger.debug(f"🛑 {self.name} stopped")

    def stop(self) -> None:
        """停止守护线程"""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        """检查是否正在运行"""
        return not self._stop_event.is_set()


class SupervisorDaemon(DaemonThread):
    """
    健康检查守护进程（监督状态机）

    状态：RUNNING / STOPPED
    - 检查失败：RUNNING 时暂停进程树；记录失败窗口的开始时间；
      失败持续超过 check_timeout 时终止根进程（每个窗口一次）
    - 检查通过：STOPPED 时恢复进程树；重置失败窗口
    - 根进程不存在时结束循环
    - 未配置检查命令时 run() 立即返回

    使用示例:
        daemon = SupervisorDaemon(process)
        daemon.start()      # 启动模式：后台线程
        daemon.run()        # 附加模式：前台运行
    """

    def __init__(
        self,
        process: SupervisedProcess,
        checker: Optional[HealthChecker] = None,
        controller: Optional[TreeController] = None,
        clock: Callable[[], float] = time.monotonic,
        join_timeout: float = 10.0,
    ) -> None:
        """
        Args:
            process: 被监督进程
            checker: 健康检查器（可选，用于依赖注入）
            controller: 进程树控制器（可选，用于依赖注入）
            clock: 单调时钟，用于计算失败窗口
            join_timeout: 关闭时等待线程结束的时间（秒）
        """
        super().__init__(
            name="SupervisorDaemon",
            check_interval=process.check_interval.total_seconds(),
            check_delay=process.check_delay.total_seconds(),
            join_timeout=join_timeout,
        )
        self.process = process
        self.checker = checker or HealthChecker()
        self.controller = controller or TreeController()
        self.outcome = CheckOutcome()
        self.checks_run = 0
        self._clock = clock

    def run(self) -> None:
        if not self.process.has_check:
            logger.debug("No check command provided, nothing to supervise")
            return
        logger.info(
            f"Supervising process {self.process.pid} with check {self.process.check_command!r} "
            f"(delay={format_duration(self.process.check_delay)}, "
            f"interval={format_duration(self.process.check_interval)}, "
            f"timeout={format_duration(self.process.check_timeout)})"
        )
        try:
            super().run()
        finally:
            # 被 stop() 结束时在控制线程内恢复进程树
            if not self.is_running:
                self.release()

    def do_work(self) -> bool:
        return self.cycle()

    def cycle(self) -> bool:
        """
        执行一轮检查（不含等待）

        Returns:
            False 表示根进程已不存在，循环应当结束
        """
        pid = self.process.pid
        if not self.controller.root_exists(self.process):
            logger.info(f"Process {pid} not found, checker exiting")
            return False

        result = self.checker.run(self.process)
        self.checks_run += 1

        if result.passed:
            self._on_pass()
        else:
            self._on_failure(result)
        return True

    def release(self) -> None:
        """结束监督时恢复仍处于暂停状态的进程树"""
        if not self.process.is_stopped:
            return
        logger.info(f"Releasing stopped process {self.process.pid}")
        try:
            self.controller.resume_tree(self.process)
        except MFException as e:
            logger.warning(f"Failed to release process {self.process.pid}: {e}")
            self.controller.thaw_descendants(self.process)

    def _on_failure(self, result: CheckResult) -> None:
        pid = self.process.pid
        detail = result.describe()
        if result.output:
            detail = f"{detail}: {result.output}"

        if self.process.state == ProcessState.RUNNING:
            logger.info(f"Process check failed, stopping process {pid}: {detail}")
            try:
                self.controller.stop_tree(self.process)
            except MFException as e:
                logger.error(f"Failed to stop process {pid}: {e}")
        else:
            logger.info(f"Process check failed: {detail}")

        now = self._clock()
        self.outcome.record_failure(now)

        timeout = self.process.check_timeout.total_seconds()
        if timeout <= 0 or self.outcome.killed:
            return
        if self.outcome.failing_for(now) < timeout:
            return

        logger.warning(
            f"Process check failing for {self.outcome.failing_for(now):.1f}s, "
            f"check timeout {format_duration(self.process.check_timeout)} reached"
        )
        self.outcome.killed = True
        try:
            self.controller.kill_root(self.process)
        except MFException as e:
            logger.error(f"Failed to terminate process {pid}: {e}")

    def _on_pass(self) -> None:
        if self.process.is_stopped:
            logger.info(f"Process check passed, resuming process {self.process.pid}")
            try:
                self.controller.resume_tree(self.process)
            except MFException as e:
                logger.error(f"Failed to resume process {self.process.pid}: {e}")
        self.outcome.record_pass()
