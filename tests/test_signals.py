import os
import signal

import pytest

from fakes import FakeFlagClient, mk_context, mk_settings
from flagcheck.cli.evaluate_once import install_signal_handlers, restore_signal_handlers
from flagcheck.lifecycle.controller import LifecycleController
from flagcheck.models.types import LifecycleState


class SignalDuringFlush(FakeFlagClient):
    """Delivers a real SIGTERM to this process while flush() is running."""

    def flush(self):
        super().flush()
        os.kill(os.getpid(), signal.SIGTERM)


@pytest.fixture
def wired():
    previous = {}

    def _wire(client):
        controller = LifecycleController(client, mk_settings(), mk_context())
        previous.update(install_signal_handlers(controller))
        return controller

    yield _wire
    restore_signal_handlers(previous)


def test_signal_mid_drain_of_normal_run_still_closes(wired):
    client = SignalDuringFlush(value=True)
    controller = wired(client)

    with pytest.raises(SystemExit) as exc:
        controller.run()

    assert exc.value.code == 1
    assert client.calls == ["wait", "variation", "flush", "close"]
    assert controller.state == LifecycleState.CLOSED


def test_signal_mid_forced_drain_still_closes_once(wired):
    client = SignalDuringFlush()
    controller = wired(client)

    with pytest.raises(SystemExit) as exc:
        controller.request_shutdown()

    assert exc.value.code == 1
    assert client.calls == ["flush", "close"]
    assert controller.state == LifecycleState.CLOSED


def test_signal_mid_drain_after_init_failure_still_closes(wired):
    client = SignalDuringFlush(init_error=RuntimeError("never ready"))
    controller = wired(client)

    with pytest.raises(SystemExit) as exc:
        controller.run()

    assert exc.value.code == 1
    assert client.calls == ["wait", "flush", "close"]
    assert controller.state == LifecycleState.FAILED


def test_request_during_release_does_not_exit():
    controller = None

    class ShutdownDuringClose(FakeFlagClient):
        def close(self):
            super().close()
            controller.request_shutdown()

    client = ShutdownDuringClose()
    controller = LifecycleController(client, mk_settings(), mk_context())

    with pytest.raises(SystemExit) as exc:
        controller.run()

    assert exc.value.code == 1
    assert client.count("close") == 1
    assert controller.state == LifecycleState.CLOSED


def test_install_returns_previous_handlers():
    controller = LifecycleController(FakeFlagClient(), mk_settings(), mk_context())
    before = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}

    previous = install_signal_handlers(controller)
    try:
        assert previous == before
        assert signal.getsignal(signal.SIGTERM) is not before[signal.SIGTERM]
    finally:
        restore_signal_handlers(previous)

    assert signal.getsignal(signal.SIGTERM) == before[signal.SIGTERM]
