"""
信号处理器

监督器自身收到 SIGINT / SIGTERM 时，按注册顺序执行关闭回调
"""
import signal
from typing import Callable, List, Optional
from loguru import logger


class SignalHandler:
    """
    优雅的信号处理器

    支持多个回调函数和链式调用，回调只执行一次

    使用示例:
        SignalHandler() \\
            .on_shutdown(daemon.stop) \\
            .on_shutdown(lambda: daemon.join(timeout=10)) \\
            .on_shutdown(launcher.terminate) \\
            .register()
    """

    def __init__(self):
        self._shutdown_callbacks: List[Callable] = []
        self._original_handlers = {}
        self._triggered = False

    def on_shutdown(self, callback: Callable) -> "SignalHandler":
        """
        添加关闭回调

        Args:
            callback: 关闭时调用的函数

        Returns:
            self (支持链式调用)
        """
        self._shutdown_callbacks.append(callback)
        return self

    def register(self, signals: Optional[List[int]] = None) -> "SignalHandler":
        """
        注册信号处理器

        Args:
            signals: 要处理的信号列表（默认：SIGTERM, SIGINT）
        """
        if signals is None:
            signals = [signal.SIGTERM, signal.SIGINT]

        for sig in signals:
            self._original_handlers[sig] = signal.signal(sig, self._handle)
            logger.debug(f"Registered handler for {signal.Signals(sig).name}")
        return self

    def trigger(self, signum: int) -> None:
        """执行所有关闭回调（重复触发时忽略）"""
        sig_name = signal.Signals(signum).name
        if self._triggered:
            logger.warning(f"Received {sig_name} again, shutdown already in progress")
            return
        self._triggered = True
        logger.info(f"Received {sig_name}, shutting down supervisor")

        for callback in self._shutdown_callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in shutdown callback: {e}")

    def restore(self) -> None:
        """恢复原始信号处理器"""
        for sig, original_handler in self._original_handlers.items():
            signal.signal(sig, original_handler)
        self._original_handlers.clear()

    def _handle(self, signum, frame) -> None:
        self.trigger(signum)
