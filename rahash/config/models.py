from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.hashing import HASH_TIMEOUT_SECONDS, MIB
from ..core.models import SCRATCH_PREFIX

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _BaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="allow", validate_assignment=True)


class ScanSettings(_BaseConfigModel):
    """Knobs of a single scan. Results never depend on ``debug``."""

    hash_timeout_seconds: float = Field(default=HASH_TIMEOUT_SECONDS, gt=0)
    scratch_root: Optional[str] = None
    scratch_prefix: str = Field(default=SCRATCH_PREFIX, min_length=1)
    debug: bool = False
    progress_log_min_bytes: int = Field(default=10 * MIB, ge=0)

    @field_validator("scratch_root")
    @classmethod
    def _blank_root_is_default(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not str(value).strip():
            return None
        return value

    @field_validator("scratch_prefix")
    @classmethod
    def _prefix_is_a_name(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            raise ValueError("scratch_prefix must not contain path separators")
        return value


class LoggingSettings(_BaseConfigModel):
    level: str = "INFO"
    log_dir: Optional[str] = None
    file_logging: bool = False
    console_logging: bool = True
    structured_json: Optional[bool] = None

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level


class AppConfig(_BaseConfigModel):
    scan: ScanSettings = Field(default_factory=ScanSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
