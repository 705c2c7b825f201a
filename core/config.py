"""
使用 Pydantic Settings 进行配置管理
从 app.properties 文件和环境变量加载配置，命令行参数优先
"""

from datetime import timedelta
from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from loguru import logger

from .exceptions import InvalidDurationException
from .models import SupervisedProcess
from .utils.logger import normalize_level
from .utils.time_utils import parse_duration
from .utils.validators import validate_pid


class Settings(BaseSettings):
    """应用配置，包含参数校验"""

    # 健康检查配置
    CHECK_COMMAND: str = Field(
        default="", description="健康检查命令，非零退出码时冻结进程，为空则不检查"
    )
    CHECK_DELAY: timedelta = Field(
        default=timedelta(0), description="每轮检查前的等待时间"
    )
    CHECK_INTERVAL: timedelta = Field(
        default=timedelta(seconds=5), description="检查之间的间隔"
    )
    CHECK_TIMEOUT: timedelta = Field(
        default=timedelta(0), description="连续失败多久后终止进程，0 表示永不超时"
    )

    # 目标进程
    TARGET_PID: Optional[int] = Field(default=None, description="要附加的已有进程 PID")

    # 进程树配置
    DISCOVERY_MAX_WORKERS: int = Field(
        default=10, ge=1, le=64, description="后代发现的并发工作线程数"
    )
    RESUME_REDISCOVER: bool = Field(
        default=True, description="恢复时重新发现后代，与暂停时的快照合并"
    )

    # 关闭配置
    SHUTDOWN_JOIN_TIMEOUT: float = Field(
        default=10.0, ge=0, description="关闭时等待检查线程退出的时间（秒）"
    )

    # 日志配置
    LOG_LEVEL: str = Field(default="ERROR", description="日志级别")
    LOG_FILE: Optional[str] = Field(default=None, description="日志文件路径")

    model_config = SettingsConfigDict(
        env_file="app.properties",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("CHECK_DELAY", "CHECK_INTERVAL", "CHECK_TIMEOUT", mode="before")
    @classmethod
    def parse_durations(cls, v: Any) -> timedelta:
        try:
            return parse_duration(v)
        except InvalidDurationException as e:
            raise ValueError(str(e)) from e

    @field_validator("CHECK_DELAY", "CHECK_INTERVAL", "CHECK_TIMEOUT")
    @classmethod
    def validate_non_negative(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("时长不能为负数")
        return v

    @field_validator("CHECK_COMMAND")
    @classmethod
    def strip_check_command(cls, v: str) -> str:
        return v.strip()

    @field_validator("TARGET_PID")
    @classmethod
    def validate_target_pid(cls, v: Optional[int]) -> Optional[int]:
        validate_pid(v)
        return v or None

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return normalize_level(v)

    def new_process(self, pid: int = 0, command: str = "") -> SupervisedProcess:
        """
        按当前检查配置构造被监督进程

        参数:
            pid: 进程ID（启动前为 0）
            command: 由本程序启动的命令行，附加模式下为空

        返回:
            SupervisedProcess 实例
        """
        return SupervisedProcess(
            pid=pid,
            command=command,
            check_command=self.CHECK_COMMAND,
            check_delay=self.CHECK_DELAY,
            check_interval=self.CHECK_INTERVAL,
            check_timeout=self.CHECK_TIMEOUT,
        )


# ========== 配置获取函数 ==========


@lru_cache()
def get_settings(**overrides: Any) -> Settings:
    """
    获取配置实例（按覆盖参数缓存）

    参数:
        overrides: 命令行等来源的覆盖值，优先于环境变量和 app.properties

    返回:
        配置实例

    异常:
        pydantic.ValidationError: 配置校验失败
    """
    settings = Settings(**overrides)
    logger.debug("Settings loaded")
    return settings
