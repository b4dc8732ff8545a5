from __future__ import annotations

from typing import Any, Dict, Literal, Optional, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError

DEFAULT_SHUTDOWN_TIMEOUT_SEC = 300.0
DEFAULT_DESCRIPTOR_FOLDER = "games/"


def normalize_descriptor_folder(folder: Optional[str]) -> str:
    """Return the folder as a prefix ending in one slash ("games" -> "games/")."""
    stripped = str(folder or "").strip().strip("/")
    return f"{stripped}/" if stripped else DEFAULT_DESCRIPTOR_FOLDER


class _BaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class PathsConfig(_BaseConfigModel):
    root_folder: Optional[str] = None
    user_maps_folder: Optional[str] = None
    default_maps_folder: Optional[str] = None


class ScannerConfig(_BaseConfigModel):
    # 0 means "half the CPUs, at least one".
    max_workers: int = Field(default=0, ge=0, le=64)
    shutdown_timeout_sec: float = Field(default=DEFAULT_SHUTDOWN_TIMEOUT_SEC, gt=0)
    descriptor_folder: str = DEFAULT_DESCRIPTOR_FOLDER

    @field_validator("descriptor_folder")
    @classmethod
    def _descriptor_prefix(cls, value: str) -> str:
        return normalize_descriptor_folder(value)


class LoggingConfig(_BaseConfigModel):
    level: str = "INFO"
    json_output: bool = Field(default=False, alias="json")
    log_dir: Optional[str] = None
    file_logging: bool = True
    max_log_size: str = "10MB"
    backup_count: int = Field(default=3, ge=0)


class RecoveryConfig(_BaseConfigModel):
    prompt_on_corrupt: bool = True


class UiConfig(_BaseConfigModel):
    backend: Optional[Literal["qt", "console"]] = None
    confirm_default_no: bool = True


class ChooserConfig(_BaseConfigModel):
    paths: PathsConfig = Field(default_factory=PathsConfig)
    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    recovery: RecoveryConfig = Field(default_factory=RecoveryConfig)
    ui: UiConfig = Field(default_factory=UiConfig)


def validate_config(payload: Optional[Dict[str, Any]]) -> ChooserConfig:
    """Validate a raw config mapping; raise ValidationError on bad values."""
    try:
        return cast(ChooserConfig, ChooserConfig.model_validate(payload or {}))
    except PydanticValidationError as exc:
        errors = exc.errors()
        field_name = None
        if errors:
            field_name = ".".join(str(part) for part in errors[0].get("loc", ()))
        raise ValidationError(
            f"Invalid configuration: {exc.error_count()} error(s)",
            field_name=field_name,
            details={"errors": [error.get("msg") for error in errors]},
        ) from exc
