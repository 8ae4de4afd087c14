from __future__ import annotations

import time
from typing import Any, Protocol

from ldclient.client import LDClient
from ldclient.context import Context
from ldclient.config import Config
from ldclient.interfaces import DataSourceState

from flagcheck.config.settings import Settings
from flagcheck.models.context import EvaluationContext

POLL_INTERVAL_SECONDS = 0.1


class InitializationError(RuntimeError):
    pass


class FlagClient(Protocol):
    def wait_for_initialization(self, timeout: float) -> None: ...

    def variation(self, flag_key: str, context: EvaluationContext, default: bool) -> Any: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


class LaunchDarklyClient:
    """
    Thin wrapper over the LaunchDarkly server SDK exposing the four calls the
    lifecycle needs. Construction never waits on the network; readiness is
    awaited separately through wait_for_initialization().
    """

    def __init__(self, ld: LDClient):
        self._ld = ld

    @classmethod
    def initialize(cls, settings: Settings) -> "LaunchDarklyClient":
        config = Config(sdk_key=settings.sdk_key, offline=settings.offline)
        return cls(LDClient(config=config, start_wait=0))

    def wait_for_initialization(self, timeout: float) -> None:
        deadline = time.monotonic() + timeout
        while not self._ld.is_initialized():
            status = self._ld.data_source_status_provider.status
            if status.state == DataSourceState.OFF:
                # Permanent failure, e.g. the SDK key was rejected.
                detail = f": {status.error.kind}" if status.error is not None else ""
                raise InitializationError(f"LaunchDarkly data source is off{detail}")
            if time.monotonic() >= deadline:
                raise InitializationError(
                    f"SDK did not initialize within {timeout:g} seconds"
                )
            time.sleep(POLL_INTERVAL_SECONDS)

    def variation(self, flag_key: str, context: EvaluationContext, default: bool) -> Any:
        ld_context = Context.builder(context.key).kind("user").build()
        return self._ld.variation(flag_key, ld_context, default)

    def flush(self) -> None:
        self._ld.flush()

    def close(self) -> None:
        self._ld.close()
