"""
进程监督器的枚举类型定义
"""

import signal
from enum import Enum


class ProcessState(str, Enum):
    """被监督进程的运行状态"""

    RUNNING = "RUNNING"  # 正在运行
    STOPPED = "STOPPED"  # 已暂停（SIGTSTP）


class SignalKind(str, Enum):
    """发送给进程树的信号种类"""

    PAUSE = "PAUSE"  # SIGTSTP
    RESUME = "RESUME"  # SIGCONT
    TERMINATE = "TERMINATE"  # SIGTERM

    @property
    def signum(self) -> int:
        """对应的 POSIX 信号编号"""
        return _SIGNALS[self]


_SIGNALS = {
    SignalKind.PAUSE: signal.SIGTSTP,
    SignalKind.RESUME: signal.SIGCONT,
    SignalKind.TERMINATE: signal.SIGTERM,
}
