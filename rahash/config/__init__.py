#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""ra-hash - Configuration Package.

Settings are pydantic models; :func:`load_config` reads them from an optional
JSON or YAML file and applies the RA_HASH_* environment overrides.
"""

from .io import ENV_DEBUG, ENV_HASH_TIMEOUT, ENV_SCRATCH_ROOT, apply_env_overrides, load_config, save_config
from .models import AppConfig, LoggingSettings, ScanSettings

__all__ = [
    "AppConfig",
    "ENV_DEBUG",
    "ENV_HASH_TIMEOUT",
    "ENV_SCRATCH_ROOT",
    "LoggingSettings",
    "ScanSettings",
    "apply_env_overrides",
    "load_config",
    "save_config",
]
