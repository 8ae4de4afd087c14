from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

SDK_KEY_ENV = "LD_SDK_KEY"
DEFAULT_FLAG_KEY = "is-app-enabled"


class MissingCredentialError(RuntimeError):
    pass


class ConfigError(RuntimeError):
    pass


class Settings(BaseModel):
    sdk_key: str = Field(min_length=1)
    flag_key: str = Field(default=DEFAULT_FLAG_KEY, min_length=1)
    default_value: bool = False
    context_prefix: str = "user"
    init_timeout: float = Field(default=10.0, gt=0)
    offline: bool = False

    def masked_key(self) -> str:
        if len(self.sdk_key) <= 4:
            return "****"
        return "*" * (len(self.sdk_key) - 4) + self.sdk_key[-4:]


def _read_yaml(config_path: str) -> Dict[str, Any]:
    path = Path(config_path)
    try:
        cfg = yaml.safe_load(path.read_text())
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}")

    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    if "sdk_key" in cfg:
        # Credentials only come from the environment.
        raise ConfigError(f"{path} must not contain sdk_key; set {SDK_KEY_ENV} instead")
    return cfg


def load_settings(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Resolve settings: CLI overrides win over the YAML file, which wins over
    the model defaults. The SDK key is read from LD_SDK_KEY only.
    """
    env = os.environ if env is None else env

    sdk_key = (env.get(SDK_KEY_ENV) or "").strip()
    if not sdk_key:
        raise MissingCredentialError(
            f'Missing {SDK_KEY_ENV} env var. It should be passed to the command, e.g. {SDK_KEY_ENV}="sdk-..." flagcheck run'
        )

    values: Dict[str, Any] = {}
    if config_path:
        values.update(_read_yaml(config_path))
    for k, v in (overrides or {}).items():
        if v is not None:
            values[k] = v
    values["sdk_key"] = sdk_key

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}")
