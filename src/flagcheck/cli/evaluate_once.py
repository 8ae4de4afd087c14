from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Dict, Optional

from flagcheck.config.settings import ConfigError, MissingCredentialError, Settings, load_settings
from flagcheck.lifecycle.controller import EXIT_FAILURE, LifecycleController
from flagcheck.sdk.ld_client import LaunchDarklyClient

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _load_or_exit(config_path: Optional[str], overrides: Dict[str, Any]) -> Settings:
    try:
        return load_settings(config_path=config_path, overrides=overrides)
    except (MissingCredentialError, ConfigError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(EXIT_FAILURE)


def install_signal_handlers(controller: LifecycleController) -> Dict[int, Any]:
    """Route SIGINT and SIGTERM to the controller; returns the handlers replaced."""
    # One handler per signal, both pointing at the same shutdown routine.
    def _handle(signum, frame):
        print(f"Received {signal.Signals(signum).name}, shutting down", file=sys.stderr)
        controller.request_shutdown()

    return {sig: signal.signal(sig, _handle) for sig in SHUTDOWN_SIGNALS}


def restore_signal_handlers(previous: Dict[int, Any]) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def check_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> None:
    settings = _load_or_exit(config_path, overrides or {})
    print(f"sdk_key: {settings.masked_key()}")
    print(f"flag_key: {settings.flag_key}")
    print(f"default_value: {str(settings.default_value).lower()}")
    print(f"context_prefix: {settings.context_prefix}")
    print(f"init_timeout: {settings.init_timeout:g}")
    print(f"offline: {str(settings.offline).lower()}")


def run(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
) -> None:
    settings = _load_or_exit(config_path, overrides or {})

    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    client = LaunchDarklyClient.initialize(settings)
    controller = LifecycleController(client, settings)
    install_signal_handlers(controller)
    controller.run()
