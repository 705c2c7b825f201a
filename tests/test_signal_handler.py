"""
Tests for the supervisor's own shutdown signal handling.
"""

import os
import signal

import pytest

from supervisor.utils import SignalHandler


@pytest.mark.unit
class TestSignalHandler:
    def test_callbacks_run_in_order_once(self):
        calls = []
        handler = (
            SignalHandler()
            .on_shutdown(lambda: calls.append("stop"))
            .on_shutdown(lambda: calls.append("join"))
        )

        handler.trigger(signal.SIGTERM)
        handler.trigger(signal.SIGTERM)

        assert calls == ["stop", "join"]

    def test_failing_callback_does_not_block_the_rest(self):
        calls = []

        def broken():
            raise RuntimeError("boom")

        handler = SignalHandler().on_shutdown(broken).on_shutdown(lambda: calls.append("next"))

        handler.trigger(signal.SIGINT)

        assert calls == ["next"]

    def test_register_and_restore(self):
        previous = signal.getsignal(signal.SIGUSR1)
        handler = SignalHandler().register([signal.SIGUSR1])

        assert signal.getsignal(signal.SIGUSR1) == handler._handle

        handler.restore()

        assert signal.getsignal(signal.SIGUSR1) == previous

    def test_delivered_signal_triggers_shutdown(self):
        calls = []
        handler = SignalHandler().on_shutdown(lambda: calls.append(1)).register([signal.SIGUSR1])
        try:
            os.kill(os.getpid(), signal.SIGUSR1)
        finally:
            handler.restore()

        assert calls == [1]
