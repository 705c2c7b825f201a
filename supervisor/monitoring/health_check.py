"""
Health Checker - 健康检查

运行配置的外部检查命令，以退出码判断通过或失败。
检查命令是监督器自己的子进程，不属于被监督的进程树，因此不会被冻结。

已知限制：
- 命令行按空格拆分，不支持引号
- 不对检查命令设置超时
"""

import os
import subprocess

from loguru import logger

from core.models import CheckResult, SupervisedProcess
from core.utils.validators import split_command_line


class HealthChecker:
    """健康检查器"""

    def run(self, process: SupervisedProcess) -> CheckResult:
        """
        执行一次健康检查

        Args:
            process: 被监督进程

        Returns:
            CheckResult，未配置检查命令或进程已结束时直接通过
        """
        if process.pid == 0:
            logger.debug("Process already stopped, skipping check")
            return CheckResult(passed=True)
        if not process.check_command:
            logger.debug("No check command provided")
            return CheckResult(passed=True)

        return self.run_command(process.check_command)

    def run_command(self, command: str) -> CheckResult:
        """
        运行检查命令直到结束

        Args:
            command: 以空格分隔的命令行

        Returns:
            CheckResult（失败时附带 stderr 与 stdout）
        """
        argv = split_command_line(command)
        if not argv:
            return CheckResult(passed=True)

        logger.debug(f"Running check command: {argv}")
        try:
            completed = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                env=os.environ.copy(),
            )
        except OSError as e:
            logger.debug(f"Check command could not be started: {e}")
            return CheckResult(passed=False, error=str(e))

        if completed.returncode == 0:
            logger.debug("Check command passed")
            return CheckResult(passed=True, returncode=0)

        output = self._join_output(completed.stderr, completed.stdout)
        logger.debug(f"Check command failed ({completed.returncode}): {output}")
        return CheckResult(passed=False, returncode=completed.returncode, output=output)

    @staticmethod
    def _join_output(stderr: str, stdout: str) -> str:
        # stderr 在前，stdout 非空时换行追加
        stderr = (stderr or "").rstrip("\n")
        stdout = (stdout or "").rstrip("\n")
        if stderr and stdout:
            return f"{stderr}\n{stdout}"
        return stderr or stdout
