"""
mf - 主入口

用法:
    mf [options] -- <command> [args...]      # 启动并监督命令
    mf --pid <pid> [options]                 # 附加到已存在的进程

检查命令以非零退出码结束时冻结进程树，再次通过时恢复；
连续失败超过 --timeout 时终止进程。
"""

import argparse
import sys
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from core.config import Settings, get_settings
from core.exceptions import LaunchException, ProcessNotFoundException
from core.utils.logger import setup_logger

from supervisor import __version__
from supervisor.core import SupervisorDaemon
from supervisor.launcher import ProcessLauncher
from supervisor.monitoring import HealthChecker
from supervisor.process import DescendantDiscoverer, SignalDispatcher, TreeController
from supervisor.utils import SignalHandler

EXIT_FAILURE = 1
EXIT_USAGE = 2

# 命令行参数 -> 配置字段
_OVERRIDES = {
    "check": "CHECK_COMMAND",
    "interval": "CHECK_INTERVAL",
    "delay": "CHECK_DELAY",
    "timeout": "CHECK_TIMEOUT",
    "log": "LOG_LEVEL",
    "pid": "TARGET_PID",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mf",
        usage="mf [options] -- <command> [args...]",
        description="运行命令（或附加到已有进程），根据检查命令的结果冻结、恢复或终止其进程树",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-check", "--check",
        help="检查命令。退出码非零时冻结进程，直到检查命令再次以零退出",
    )
    parser.add_argument(
        "-interval", "--interval",
        help="两次检查之间的间隔（默认 5s）",
    )
    parser.add_argument(
        "-delay", "--delay",
        help="每轮检查前的延迟（默认 0s）",
    )
    parser.add_argument(
        "-timeout", "--timeout",
        help="连续检查失败多久后终止进程（默认 0s，永不超时）",
    )
    parser.add_argument(
        "-log", "--log",
        help="日志级别（默认读取 LOG_LEVEL，否则为 error）",
    )
    parser.add_argument(
        "-pid", "--pid",
        type=int,
        help="要监督的已有进程 PID，优先于命令",
    )
    parser.add_argument(
        "-version", "--version",
        action="store_true",
        help="打印版本并退出",
    )
    parser.add_argument("command", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    解析命令行参数

    "--" 之后的所有内容都属于被监督命令

    Args:
        argv: 参数列表（默认 sys.argv[1:]）

    Returns:
        Namespace，command 为命令参数列表
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    trailing: List[str] = []
    if "--" in argv:
        index = argv.index("--")
        trailing = argv[index + 1:]
        argv = argv[:index]

    args = build_parser().parse_args(argv)
    command = list(args.command or [])
    if command and command[0] == "--":
        command = command[1:]
    args.command = command + trailing
    return args


def load_settings(args: argparse.Namespace) -> Settings:
    """命令行覆盖值优先于环境变量"""
    overrides = {
        field: getattr(args, name)
        for name, field in _OVERRIDES.items()
        if getattr(args, name) is not None
    }
    return get_settings(**overrides)


def build_controller(settings: Settings, dispatcher: SignalDispatcher) -> TreeController:
    discoverer = DescendantDiscoverer(max_workers=settings.DISCOVERY_MAX_WORKERS)
    return TreeController(
        dispatcher=dispatcher,
        discoverer=discoverer,
        rediscover_on_resume=settings.RESUME_REDISCOVER,
    )


def run_launched(
    command: List[str], settings: Settings, launcher: ProcessLauncher, controller: TreeController
) -> int:
    """启动命令，在后台线程中检查，前台等待命令结束"""
    try:
        process = launcher.start(" ".join(command))
    except LaunchException as e:
        logger.error(str(e))
        return EXIT_FAILURE

    daemon = SupervisorDaemon(
        process,
        checker=HealthChecker(),
        controller=controller,
        join_timeout=settings.SHUTDOWN_JOIN_TIMEOUT,
    )
    daemon.start()

    handler = (
        SignalHandler()
        .on_shutdown(daemon.stop)
        .on_shutdown(lambda: daemon.join(timeout=daemon.join_timeout))
        .on_shutdown(launcher.terminate)
        .register()
    )

    try:
        returncode = launcher.wait()
    finally:
        daemon.stop()
        daemon.join(timeout=daemon.join_timeout)
        handler.restore()

    return launcher.exit_status(returncode)


def run_attached(
    pid: int, settings: Settings, launcher: ProcessLauncher, controller: TreeController
) -> int:
    """附加到已有进程，在前台运行检查循环"""
    try:
        process = launcher.attach(pid)
    except ProcessNotFoundException as e:
        logger.error(f"pid does not exist: {e}")
        return EXIT_FAILURE

    daemon = SupervisorDaemon(
        process,
        checker=HealthChecker(),
        controller=controller,
        join_timeout=settings.SHUTDOWN_JOIN_TIMEOUT,
    )
    handler = SignalHandler().on_shutdown(daemon.stop).register()

    try:
        daemon.run()
    finally:
        handler.restore()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """mf 主入口"""
    args = parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    try:
        settings = load_settings(args)
    except ValidationError as e:
        setup_logger("ERROR")
        logger.error(f"Invalid configuration: {e}")
        return EXIT_USAGE

    setup_logger(settings.LOG_LEVEL, settings.LOG_FILE)

    dispatcher = SignalDispatcher()
    controller = build_controller(settings, dispatcher)
    launcher = ProcessLauncher(settings, dispatcher)

    if settings.TARGET_PID:
        return run_attached(settings.TARGET_PID, settings, launcher, controller)

    if not args.command:
        logger.error("no command or --pid provided")
        build_parser().print_usage(sys.stderr)
        return EXIT_FAILURE

    return run_launched(args.command, settings, launcher, controller)


if __name__ == "__main__":
    sys.exit(main())
