"""Config I/O utilities."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError
from .models import AppConfig

logger = logging.getLogger(__name__)

ENV_DEBUG = "RA_HASH_DEBUG"
ENV_HASH_TIMEOUT = "RA_HASH_HASH_TIMEOUT"
ENV_SCRATCH_ROOT = "RA_HASH_SCRATCH_ROOT"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
_YAML_SUFFIXES = {".yaml", ".yml"}


def _env_bool(name: str, value: str) -> bool:
    text = value.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _read_file(config_path: Path) -> Dict[str, Any]:
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file: {e}", str(config_path)) from e
    try:
        if config_path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse config file: {e}", str(config_path)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", str(config_path))
    return data


def apply_env_overrides(data: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Overlay the RA_HASH_* variables onto raw config data."""
    env = os.environ if environ is None else environ
    scan = dict(data.get("scan") or {})

    if ENV_DEBUG in env:
        scan["debug"] = _env_bool(ENV_DEBUG, env[ENV_DEBUG])
    if env.get(ENV_HASH_TIMEOUT, "").strip():
        try:
            scan["hash_timeout_seconds"] = float(env[ENV_HASH_TIMEOUT])
        except ValueError as e:
            raise ConfigurationError(f"{ENV_HASH_TIMEOUT} must be a number of seconds") from e
    if env.get(ENV_SCRATCH_ROOT, "").strip():
        scan["scratch_root"] = env[ENV_SCRATCH_ROOT].strip()

    if scan:
        data = dict(data)
        data["scan"] = scan
    return data


def load_config(config_path: Optional[str] = None,
                environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build the application config from an optional JSON/YAML file plus the environment."""
    data: Dict[str, Any] = {}
    if config_path is not None:
        data = _read_file(Path(config_path))
        logger.debug("Loaded config from %s", config_path)
    data = apply_env_overrides(data, environ)
    try:
        return AppConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e.error_count()} error(s)",
            config_path,
            {"errors": [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]},
        ) from e


def save_config(config: AppConfig, config_path: str) -> None:
    """Write the config as JSON or YAML depending on the file suffix."""
    path = Path(config_path)
    data = config.model_dump(mode="json")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() in _YAML_SUFFIXES:
                yaml.safe_dump(data, f, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
    except OSError as e:
        raise ConfigurationError(f"Cannot write config file: {e}", config_path) from e
