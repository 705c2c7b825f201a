"""
mf 日志配置（loguru）

-log / LOG_LEVEL 接受 loguru 级别名，以及 warn、fatal、panic 等常见别名
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_LEVEL_ALIASES = {
    "WARN": "WARNING",
    "FATAL": "CRITICAL",
    "PANIC": "CRITICAL",
}

# 检查循环、后代发现和信号发送分布在多个线程中，输出带上线程名
CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{thread.name: <16}</magenta> | <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {process.id} | "
    "{thread.name} | {name}:{function}:{line} | {message}"
)


def normalize_level(name: str) -> str:
    """
    将日志级别名转换为 loguru 级别

    Raises:
        ValueError: 未知级别
    """
    level = name.strip().upper()
    level = _LEVEL_ALIASES.get(level, level)
    if level not in LEVELS:
        raise ValueError(f"unknown log level {name!r}, expected one of {', '.join(LEVELS)}")
    return level


def setup_logger(log_level: str = "ERROR", log_file: Optional[str] = None) -> None:
    """
    配置 mf 的日志输出：stderr，以及可选的日志文件

    被监督命令继承 stdout / stderr，mf 自身的日志只写 stderr。
    """
    level = normalize_level(log_level)
    logger.remove()

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="50 MB",
            retention="7 days",
            enqueue=True,
        )

    logger.debug(f"mf logging at {level}" + (f", file {log_file}" if log_file else ""))
