from __future__ import annotations

import sys
import threading
from typing import NoReturn, Optional

from flagcheck.config.settings import Settings
from flagcheck.models.context import EvaluationContext, FlagResult
from flagcheck.models.types import LifecycleEvent, LifecycleState
from flagcheck.sdk.ld_client import FlagClient
from flagcheck.state.machine import next_state

EXIT_OK = 0
EXIT_FAILURE = 1
# Signal-initiated shutdown reports failure, as the original CLI did.
EXIT_SHUTDOWN = 1


class LifecycleController:
    """
    Drives a flag client through init -> ready -> evaluate -> flush -> close.

    The controller exclusively owns the client handle. The flush/close pair
    is guarded by a one-shot lock, so whichever of run() or
    request_shutdown() reaches it first releases the client and any later
    caller just exits. A request that lands while the drain is running only
    marks the run as shut down; the drain finishes and exits with
    EXIT_SHUTDOWN.
    """

    def __init__(
        self,
        client: FlagClient,
        settings: Settings,
        context: Optional[EvaluationContext] = None,
    ):
        self._client = client
        self._settings = settings
        self._context = context or EvaluationContext.for_process(settings.context_prefix)
        self._state = LifecycleState.STARTING
        self._release_guard = threading.Lock()
        self._releasing = False
        self._shutdown_requested = False

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def context(self) -> EvaluationContext:
        return self._context

    def _advance(self, event: LifecycleEvent) -> None:
        self._state = next_state(self._state, event)

    def run(self) -> NoReturn:
        try:
            self._client.wait_for_initialization(self._settings.init_timeout)
        except Exception as e:
            self._fail(LifecycleEvent.INIT_FAILED, e)
        self._advance(LifecycleEvent.INITIALIZED)
        print("SDK successfully initialized!")

        try:
            result = self.evaluate()
        except Exception as e:
            self._fail(LifecycleEvent.EVAL_FAILED, e)
        self._advance(LifecycleEvent.EVALUATED)
        print(result.line())

        self._advance(LifecycleEvent.DRAIN)
        self._release()
        sys.exit(EXIT_SHUTDOWN if self._shutdown_requested else EXIT_OK)

    def evaluate(self) -> FlagResult:
        default = self._settings.default_value
        value = self._client.variation(self._settings.flag_key, self._context, default)
        if not isinstance(value, bool):
            value = default
        return FlagResult(flag_key=self._settings.flag_key, value=value)

    def request_shutdown(self) -> None:
        self._shutdown_requested = True
        if self._releasing:
            # Signal landed mid-drain; the drain in progress finishes and exits.
            return
        # Once released, a further request exits without client calls.
        self._advance(LifecycleEvent.SHUTDOWN_REQUESTED)
        self._release()
        sys.exit(EXIT_SHUTDOWN)

    def _fail(self, event: LifecycleEvent, error: Exception) -> NoReturn:
        print(f"{type(error).__name__}: {error}", file=sys.stderr)
        self._advance(event)
        self._release()
        sys.exit(EXIT_FAILURE)

    def _release(self) -> bool:
        was_releasing = self._releasing
        # Mark before acquiring so a signal between the two sees the drain.
        self._releasing = True
        if not self._release_guard.acquire(blocking=False):
            self._releasing = was_releasing
            return False
        try:
            self._flush_and_close()
        finally:
            self._releasing = False

        if self._state == LifecycleState.DRAINING:
            self._advance(LifecycleEvent.CLOSE_COMPLETE)
        return True

    def _flush_and_close(self) -> None:
        # Best effort: a failing flush must not keep the client open.
        try:
            self._client.flush()
            print("Flushing connections ...")
        except Exception as e:
            print(f"flush failed: {type(e).__name__}: {e}", file=sys.stderr)

        try:
            self._client.close()
            print("Shutting down ...")
        except Exception as e:
            print(f"close failed: {type(e).__name__}: {e}", file=sys.stderr)
