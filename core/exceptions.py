"""
进程监督器的自定义异常
"""
from typing import Any, Optional


class MFException(Exception):
    """mf 基础异常类"""
    pass


# ========== 配置异常 ==========

class ConfigurationException(MFException):
    """配置相关异常基类"""
    pass


class InvalidDurationException(ConfigurationException):
    """无法解析的时长字符串"""
    def __init__(self, value: Any, reason: str = "expected e.g. 300ms, 5s, 1m30s"):
        self.value = value
        super().__init__(f"Invalid duration {value!r}: {reason}")


# ========== 进程异常 ==========

class ProcessException(MFException):
    """进程相关异常基类"""
    pass


class LaunchException(ProcessException):
    """被监督命令无法启动"""
    def __init__(self, command: str, detail: str):
        self.command = command
        super().__init__(f"Failed to start {command!r}: {detail}")


class ProcessNotFoundException(ProcessException):
    """附加的 PID 不存在"""
    def __init__(self, pid: int):
        self.pid = pid
        super().__init__(f"Process {pid} does not exist")


class SignalDeliveryException(ProcessException):
    """信号发送失败（通常目标进程已退出）"""
    def __init__(self, pid: int, kind: str, reason: str):
        self.pid = pid
        self.kind = kind
        self.reason = reason
        super().__init__(f"Failed to send {kind} to process {pid}: {reason}")


class DiscoveryException(ProcessException):
    """无法获取系统进程快照"""
    def __init__(self, detail: str, root_pid: Optional[int] = None):
        self.root_pid = root_pid
        prefix = f"Descendant discovery for {root_pid} failed" if root_pid else "Process snapshot failed"
        super().__init__(f"{prefix}: {detail}")
