from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .schema import ConfigValidationError, validate_config_document

DEFAULT_CONFIG_RELATIVE = Path("config") / "config.yml"
ENV_LOG_LEVEL = "PULLFINDER_LOG_LEVEL"
ENV_TIMEOUT = "PULLFINDER_TIMEOUT"


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "WARNING"
    file: Optional[Path] = None
    max_mb: int = 5
    backup_count: int = 3


@dataclass(slots=True)
class ValidationConfig:
    """Settings of the URL validation requests."""

    enabled: bool = True
    timeout_s: float = 10.0


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk and environment."""

    source: Optional[Path] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    # Raw profile mappings; turned into GameProfile objects by the caller.
    profiles: List[Dict[str, Any]] = field(default_factory=list)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            content = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigValidationError([f"{path}: {exc}"]) from exc
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigValidationError([f"Config file {path} must contain a mapping at the top level."])
    return content


def _apply_environment(config: AppConfig) -> None:
    level = os.environ.get(ENV_LOG_LEVEL)
    if level:
        config.logging.level = level.upper()
    timeout = os.environ.get(ENV_TIMEOUT)
    if timeout:
        try:
            value = float(timeout)
        except ValueError:
            return
        if value > 0:
            config.validation.timeout_s = value


def load_app_config(config_path: Optional[Path] = None, base_dir: Optional[Path] = None) -> AppConfig:
    """
    Load configuration, providing sensible defaults.

    Without *config_path*, ``config/config.yml`` under *base_dir* (default:
    the working directory) is read when it exists. An explicit *config_path*
    must exist.

    Raises:
        ConfigValidationError: Unreadable YAML or schema violations
    """
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigValidationError([f"Config file not found: {config_path}"])
        source = config_path
    else:
        source = (base_dir or Path.cwd()) / DEFAULT_CONFIG_RELATIVE

    document = _load_yaml(source)
    validate_config_document(document)

    logging_cfg = document.get("logging", {})
    log_file = logging_cfg.get("file")
    logging_config = LoggingConfig(
        level=logging_cfg.get("level", "WARNING").upper(),
        file=Path(log_file) if log_file else None,
        max_mb=logging_cfg.get("max_mb", 5),
        backup_count=logging_cfg.get("backup_count", 3),
    )

    validation_cfg = document.get("validation", {})
    validation_config = ValidationConfig(
        enabled=validation_cfg.get("enabled", True),
        timeout_s=float(validation_cfg.get("timeout_s", 10.0)),
    )

    config = AppConfig(
        source=source if source.exists() else None,
        logging=logging_config,
        validation=validation_config,
        profiles=list(document.get("profiles", [])),
    )
    _apply_environment(config)
    return config
