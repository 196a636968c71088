"""Pydantic-based configuration model and YAML loader for CStyleIQ."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cstyleiq.rules.base_rule import ConfigurationError, ConstructKind, ViolationSeverity

__all__ = ["RuleDefinition", "CStyleIQSettings", "load_settings"]

_CONFIG_FILE_NAMES: list[str] = [
    "cstyleiq.yaml",
    "cstyleiq.yml",
    ".cstyleiq.yaml",
    ".cstyleiq.yml",
]


def _upper(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


class RuleDefinition(BaseModel):
    """A convention expressed as data: what it targets and how it is matched."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Unique rule identifier.")
    target: ConstructKind = Field(description="Construct kind the rule applies to.")
    matcher: str = Field(description="Name of a registered matcher kind.")
    params: dict[str, Any] = Field(default_factory=dict, description="Matcher parameters.")
    message: str = Field(
        default="{construct} '{name}' {detail}",
        description="Message template; fields: {name}, {construct}, {detail}.",
    )
    severity: ViolationSeverity = Field(default=ViolationSeverity.ERROR)
    description: str = ""
    where: dict[str, Any] = Field(
        default_factory=dict,
        description="Token attributes that must match for the rule to apply.",
    )

    @field_validator("severity", mode="before")
    @classmethod
    def _normalise_severity(cls, value: Any) -> Any:
        return _upper(value)


class CStyleIQSettings(BaseModel):
    """Top-level CStyleIQ configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    rule_set: str = Field(
        default="default",
        alias="ruleSet",
        description="Built-in convention profile: default, minimal or none.",
    )
    severity_overrides: dict[str, ViolationSeverity] = Field(
        default_factory=dict,
        alias="severityOverrides",
        description="Per-rule severity mapping.",
    )
    exclude_paths: list[str] = Field(
        default_factory=list,
        alias="excludePaths",
        description="Glob patterns of paths to skip.",
    )
    output_format: Literal["text", "structured"] = Field(
        default="text",
        alias="outputFormat",
        description="Report format: 'text' or 'structured'.",
    )
    disabled_rules: list[str] = Field(
        default_factory=list,
        alias="disabledRules",
        description="Rule ids removed from the selected profile.",
    )
    custom_rules: list[RuleDefinition] = Field(
        default_factory=list,
        alias="customRules",
        description="Additional rule definitions appended after the profile.",
    )
    extensions: list[str] = Field(
        default_factory=lambda: [".c", ".h"],
        description="File extensions collected when walking directories.",
    )
    header_extensions: list[str] = Field(
        default_factory=lambda: [".h"],
        alias="headerExtensions",
        description="Extensions treated as headers (header-guard checks).",
    )
    jobs: int = Field(default=4, ge=1, description="Number of files checked in parallel.")

    @field_validator("severity_overrides", mode="before")
    @classmethod
    def _normalise_overrides(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: _upper(v) for k, v in value.items()}
        return value


def _find_config_file(search_dir: Path) -> Path | None:
    """Walk up from *search_dir* looking for a config file."""
    current = search_dir.resolve()
    while True:
        for name in _CONFIG_FILE_NAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{path}: invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")
    return data


def load_settings(
    config_path: Path | None = None,
    search_dir: Path | None = None,
) -> CStyleIQSettings:
    """Load settings from a YAML file, falling back to defaults."""
    raw: dict[str, Any] = {}

    if config_path is not None:
        resolved = Path(config_path).resolve()
        if not resolved.is_file():
            raise ConfigurationError(f"config file not found: {config_path}")
        raw = _read_yaml(resolved)
    else:
        found = _find_config_file(search_dir or Path.cwd())
        if found is not None:
            raw = _read_yaml(found)

    try:
        return CStyleIQSettings(**raw)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid settings: {exc}") from exc
