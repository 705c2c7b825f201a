"""
Process Launcher - 被监督进程的启动、附加与等待
"""

import os
import signal
import subprocess
from typing import Optional

from loguru import logger

from core.config import Settings
from core.exceptions import LaunchException, ProcessNotFoundException
from core.models import SupervisedProcess
from core.utils.validators import split_command_line

from supervisor.process import SignalDispatcher


class ProcessLauncher:
    """
    进程启动器

    - start(): 启动命令，继承标准输入输出和环境变量
    - attach(): 附加到已存在的 PID
    - wait(): 等待启动的命令结束并返回退出码
    """

    def __init__(self, settings: Settings, dispatcher: Optional[SignalDispatcher] = None):
        self.settings = settings
        self.dispatcher = dispatcher or SignalDispatcher()
        self.popen: Optional[subprocess.Popen] = None

    def start(self, command: str) -> SupervisedProcess:
        """
        启动被监督命令

        Args:
            command: 以空格分隔的命令行

        Returns:
            处于 RUNNING 状态的 SupervisedProcess

        Raises:
            LaunchException: 命令为空或无法启动
        """
        argv = split_command_line(command)
        if not argv:
            raise LaunchException(command, "empty command")

        logger.debug(f"Starting process: cmd={argv[0]} args={argv[1:]}")
        try:
            self.popen = subprocess.Popen(argv, env=os.environ.copy())
        except OSError as e:
            logger.error(f"Failed to start process: {e}")
            raise LaunchException(command, str(e)) from e

        logger.info(f"Process started, PID: {self.popen.pid}")
        return self.settings.new_process(pid=self.popen.pid, command=" ".join(argv))

    def attach(self, pid: int) -> SupervisedProcess:
        """
        附加到已存在的进程

        Raises:
            ProcessNotFoundException: PID 不存在
        """
        if not self.dispatcher.pid_exists(pid):
            raise ProcessNotFoundException(pid)

        logger.info(f"Attached to process {pid}")
        return self.settings.new_process(pid=pid)

    def wait(self) -> int:
        """
        等待启动的进程结束

        Returns:
            退出码（被信号终止时为负的信号编号），附加模式下为 0
        """
        if self.popen is None:
            return 0

        returncode = self.popen.wait()
        logger.info(f"Process {self.popen.pid} finished, exit code: {returncode}")
        return returncode

    def terminate(self) -> None:
        """向仍在运行的启动进程转发 SIGTERM"""
        if self.popen is None or self.popen.poll() is not None:
            return
        logger.info(f"Forwarding SIGTERM to process {self.popen.pid}")
        try:
            self.popen.send_signal(signal.SIGTERM)
        except ProcessLookupError:
            logger.debug(f"Process {self.popen.pid} already exited")

    @staticmethod
    def exit_status(returncode: int) -> int:
        """将 Popen 退出码转换为 shell 风格的退出状态"""
        if returncode < 0:
            return 128 + (-returncode)
        return returncode
