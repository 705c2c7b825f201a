"""
监督器数据模型

SupervisedProcess 是被监督进程的聚合根，由状态机独占；
CheckResult / CheckOutcome 是健康检查产生的短生命周期值。
"""
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from .enums import ProcessState


@dataclass
class SupervisedProcess:
    """
    被监督进程

    pid 为 0 表示尚未启动或已经结束，此时所有进程树操作都是空操作。
    children 只是最近一次发现的后代快照，其中的进程可能已经独立退出。
    """

    pid: int = 0
    command: str = ""
    children: List[int] = field(default_factory=list)
    state: ProcessState = ProcessState.RUNNING
    check_command: str = ""
    check_delay: timedelta = timedelta(0)
    check_interval: timedelta = timedelta(seconds=5)
    check_timeout: timedelta = timedelta(0)

    @property
    def is_attached(self) -> bool:
        """是否附加到已存在的进程（而非由本程序启动）"""
        return self.pid != 0 and not self.command

    @property
    def is_stopped(self) -> bool:
        return self.state == ProcessState.STOPPED

    @property
    def has_check(self) -> bool:
        return bool(self.check_command)


@dataclass
class CheckResult:
    """单次健康检查命令的执行结果"""

    passed: bool
    returncode: Optional[int] = None
    output: str = ""
    error: Optional[str] = None

    def describe(self) -> str:
        """用于日志的简短描述"""
        if self.passed:
            return "passed"
        if self.error:
            return self.error
        return f"exit status {self.returncode}"


@dataclass
class CheckOutcome:
    """
    失败窗口跟踪

    failure_since 为上次通过后第一次失败的单调时钟时间戳；
    killed 表示本窗口内已经发送过终止信号。
    """

    failure_since: Optional[float] = None
    killed: bool = False

    def record_failure(self, now: float) -> None:
        if self.failure_since is None:
            self.failure_since = now

    def record_pass(self) -> None:
        self.failure_since = None
        self.killed = False

    def failing_for(self, now: float) -> float:
        """当前失败窗口已持续的秒数"""
        if self.failure_since is None:
            return 0.0
        return now - self.failure_since
