"""
验证工具
"""
from typing import List, Optional


def validate_pid(pid: Optional[int]) -> bool:
    """
    验证进程ID

    Args:
        pid: 要验证的进程ID（None 或 0 表示未指定）

    Returns:
        有效则返回True

    Raises:
        ValueError: 如果PID为负数
    """
    if pid is None:
        return True

    if pid < 0:
        raise ValueError(f"PID must be a positive integer, got: {pid}")

    return True


def split_command_line(command: str) -> List[str]:
    """
    按单个空格拆分命令行

    不支持引号或转义，"a  b" 中的空字段会被丢弃

    Args:
        command: 命令行字符串

    Returns:
        [可执行文件, 参数...]，空命令返回空列表
    """
    return [part for part in command.strip().split(" ") if part]
