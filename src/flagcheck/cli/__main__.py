from __future__ import annotations

import argparse
from typing import Any, Dict

from flagcheck.cli import evaluate_once


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "flag_key": args.flag_key,
        "init_timeout": args.timeout,
        # store_true: only override the YAML value when the flag is given
        "offline": True if args.offline else None,
    }


def _cmd_run(args: argparse.Namespace) -> None:
    evaluate_once.run(config_path=args.config, overrides=_overrides(args), verbose=args.verbose)


def _cmd_check_config(args: argparse.Namespace) -> None:
    evaluate_once.check_config(config_path=args.config, overrides=_overrides(args))


def _add_settings_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=None, help="Optional YAML file with non-secret settings")
    p.add_argument("--flag-key", default=None, help="Flag to evaluate (default: is-app-enabled)")
    p.add_argument("--timeout", type=float, default=None, help="Seconds to wait for SDK initialization")
    p.add_argument("--offline", action="store_true", help="Run the SDK in offline mode")


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="flagcheck")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Initialize the SDK, evaluate one flag, shut down")
    _add_settings_args(p_run)
    p_run.add_argument("--verbose", action="store_true", help="Show SDK logs")
    p_run.set_defaults(func=_cmd_run)

    p_check = sub.add_parser("check-config", help="Validate settings without contacting LaunchDarkly")
    _add_settings_args(p_check)
    p_check.set_defaults(func=_cmd_check_config)

    args = p.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
