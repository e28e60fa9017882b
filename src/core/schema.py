"""JSON schema helpers for config documents."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from jsonschema import Draft202012Validator

from extractors.exceptions import ConfigurationError

from .logging import get_logger

LOGGER = get_logger("core.schema")


class ConfigValidationError(ConfigurationError):
    """Raised when a config document does not match its schema."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__(" | ".join(self.errors))

    def __str__(self) -> str:
        return " | ".join(self.errors)


PROFILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "data_dir", "markers", "url_start", "url_end"],
    "additionalProperties": False,
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "data_dir": {"type": "string", "minLength": 1},
        "markers": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {
                    "type": "array",
                    "minItems": 1,
                    "items": {"type": "string", "minLength": 1},
                },
            ]
        },
        "url_start": {"type": "string", "minLength": 1},
        "url_end": {"type": "string", "minLength": 1},
        "api": {
            "type": "object",
            "required": ["host"],
            "additionalProperties": False,
            "properties": {
                "host": {"type": "string", "minLength": 1},
                "path": {"type": "string"},
                "retained_params": {"type": "array", "items": {"type": "string"}},
                "extra_params": {
                    "type": "object",
                    "additionalProperties": {"type": ["string", "integer"]},
                },
            },
        },
    },
}

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "logging": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "level": {
                    "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL",
                             "debug", "info", "warning", "error", "critical"],
                },
                "file": {"type": ["string", "null"]},
                "max_mb": {"type": "integer", "minimum": 1},
                "backup_count": {"type": "integer", "minimum": 0},
            },
        },
        "validation": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "enabled": {"type": "boolean"},
                "timeout_s": {"type": "number", "exclusiveMinimum": 0},
            },
        },
        "profiles": {"type": "array", "items": PROFILE_SCHEMA},
    },
}


def iter_validation_errors(validator: Draft202012Validator, document: Any) -> Iterable[str]:
    """Yield human-readable error strings for a document."""
    for error in validator.iter_errors(document):
        path = "/".join(str(p) for p in error.path)
        pointer = f"{path}: " if path else ""
        yield f"{pointer}{error.message}"


def validate_config_document(document: Any, schema: Dict[str, Any] = CONFIG_SCHEMA) -> None:
    """
    Validate a loaded config document against *schema*.

    Raises ConfigValidationError listing every problem found.
    """
    validator = Draft202012Validator(schema)
    errors = sorted(iter_validation_errors(validator, document))
    if errors:
        LOGGER.error("Config validation failed: %s", " | ".join(errors))
        raise ConfigValidationError(errors)
