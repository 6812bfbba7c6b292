"""Configuration system for disk-scan application.

This module implements the scan configuration schema using Pydantic for
validation. Settings can come from an optional YAML file (with ``${VAR}``
environment variable references) and from command-line overrides; the
command line always wins over the file, and the file over built-in defaults.
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Final, Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from disk_scan.core.channel import DEFAULT_CHANNEL_CAPACITY
from disk_scan.core.errors import ConfigurationError, EnvironmentVariableError
from disk_scan.types.models import SizeMode, UnitSystem

# Regular expression pattern for environment variable references
# Matches ${VARIABLE_NAME} syntax where VARIABLE_NAME can contain letters, digits, and underscores
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Z0-9_]+)\}")


class ScanConfig(BaseModel):
    """Validated settings for one scan run.

    Defines the scan root, the top-level exclusions, the optional CSV
    destination and the tuning knobs of the concurrent pipeline.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    root: Annotated[
        Path | None,
        Field(description="Directory whose immediate children are scanned"),
    ] = None
    exclude: Annotated[
        tuple[str, ...],
        Field(description="Entry names or full paths to skip at the top level"),
    ] = ()
    to_csv: Annotated[
        Path | None,
        Field(description="Write the sorted report as CSV to this path"),
    ] = None
    workers: Annotated[
        int | None,
        Field(gt=0, description="Traversal worker threads (default: available CPUs)"),
    ] = None
    channel_capacity: Annotated[
        int,
        Field(gt=0, description="Maximum number of buffered results between tasks and report"),
    ] = DEFAULT_CHANNEL_CAPACITY
    unit_system: Annotated[
        UnitSystem,
        Field(description="Units used for human-readable sizes"),
    ] = UnitSystem.DECIMAL
    size_mode: Annotated[
        SizeMode,
        Field(description="Count allocated disk usage or apparent file size"),
    ] = SizeMode.DISK_USAGE
    color: Annotated[
        bool,
        Field(description="Decorate console output with ANSI colours"),
    ] = True
    log_level: Annotated[
        str,
        Field(
            description="Logging level",
            pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        ),
    ] = "WARNING"

    @field_validator("exclude", mode="before")
    @classmethod
    def split_exclusion_string(cls, v: object) -> object:
        """Accept a comma-separated string as well as a list of exclusions.

        Args:
            v: Raw exclusion value

        Returns:
            Sequence of exclusion strings
        """
        if isinstance(v, str):
            return tuple(item for item in v.split(",") if item.strip())
        return v

    @field_validator("exclude", mode="after")
    @classmethod
    def validate_exclusions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject exclusions that cannot name a filesystem entry.

        Args:
            v: Exclusion strings

        Returns:
            Validated exclusions

        Raises:
            ValueError: If an exclusion contains a NUL character
        """
        for exclusion in v:
            if "\x00" in exclusion:
                msg = f"Exclusion contains a NUL character: {exclusion!r}"
                raise ValueError(msg)
        return v

    def merged(self, **overrides: object) -> Self:
        """Return a copy with command-line overrides applied.

        Overrides whose value is None are ignored, so unset CLI flags keep
        the value from the file. Exclusions from both sources are combined.

        Args:
            **overrides: Field values from the command line

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        data: dict[str, object] = self.model_dump()
        for key, value in overrides.items():
            if value is None:
                continue
            if key == "exclude":
                data[key] = (*self.exclude, *_as_exclusion_tuple(value))
            else:
                data[key] = value

        try:
            return type(self).model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(format_validation_error(e, source="command line")) from e


def _as_exclusion_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(item for item in value.split(",") if item.strip())
    if isinstance(value, (list, tuple)):
        # Each repeated --exclude flag may itself hold a comma-separated list
        return tuple(
            part
            for item in value  # pyright: ignore[reportUnknownVariableType]  # CLI boundary
            for part in str(item).split(",")  # pyright: ignore[reportUnknownArgumentType]
            if part.strip()
        )
    msg = f"Unsupported exclusion value: {value!r}"
    raise ConfigurationError(msg)


def resolve_env_var(value: str) -> str:
    """Resolve environment variable references in a string value.

    Parses ${VARIABLE_NAME} syntax and replaces with environment variable values.
    Supports multiple environment variable references in a single string.

    Args:
        value: String potentially containing environment variable references

    Returns:
        String with environment variables resolved

    Raises:
        EnvironmentVariableError: If a required environment variable is missing

    Examples:
        >>> os.environ["SCAN_ROOT"] = "/data"
        >>> resolve_env_var("${SCAN_ROOT}/media")
        '/data/media'
        >>> resolve_env_var("no variables here")
        'no variables here'
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)

        if env_value is None:
            msg = (
                f"Required environment variable '{var_name}' is not set. "
                f"Please set this variable before starting the application."
            )
            raise EnvironmentVariableError(msg)

        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def resolve_env_vars_in_dict(data: Mapping[str, object]) -> dict[str, object]:
    """Recursively resolve environment variables in a dictionary.

    Traverses nested dictionaries and lists, resolving environment variable
    references in string values. Non-string values are preserved as-is.

    Args:
        data: Dictionary potentially containing environment variable references

    Returns:
        New dictionary with environment variables resolved

    Raises:
        EnvironmentVariableError: If a required environment variable is missing
    """
    result: dict[str, object] = {}

    for key, value in data.items():
        if isinstance(value, str):
            result[key] = resolve_env_var(value)
        elif isinstance(value, dict):
            # YAML data is untyped at load time; validated by Pydantic after resolution
            result[key] = resolve_env_vars_in_dict(value)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
        elif isinstance(value, list):
            resolved_list: list[object] = []
            for item in value:  # pyright: ignore[reportUnknownVariableType]  # YAML list items
                if isinstance(item, str):
                    resolved_list.append(resolve_env_var(item))
                elif isinstance(item, dict):
                    resolved_list.append(resolve_env_vars_in_dict(item))  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
                else:
                    resolved_list.append(item)  # pyright: ignore[reportUnknownArgumentType]  # YAML primitives
            result[key] = resolved_list
        else:
            result[key] = value

    return result


def format_validation_error(error: ValidationError, *, source: str) -> str:
    """Format Pydantic validation errors with field-level diagnostics.

    Args:
        error: Validation error raised by Pydantic
        source: Where the invalid values came from (file path or "command line")

    Returns:
        Multi-line, actionable error message
    """
    error_lines = ["Configuration validation failed:", ""]
    for detail in error.errors():
        field_path = " → ".join(str(loc) for loc in detail["loc"])
        error_lines.append(f"  Field: {field_path}")
        error_lines.append(f"  Error: {detail['msg']}")
        error_lines.append(f"  Type: {detail['type']}")
        error_lines.append("")

    error_lines.append(f"Configuration source: {source}")
    error_lines.append("Please fix the above errors and try again.")
    return "\n".join(error_lines)


def load_config(config_path: Path) -> ScanConfig:
    """Load and validate scan configuration from a YAML file.

    Loads the configuration file, resolves environment variables, and
    validates against the ScanConfig schema. Provides fail-fast validation
    with actionable error messages.

    Args:
        config_path: Path to configuration YAML file

    Returns:
        Validated ScanConfig instance

    Raises:
        ConfigurationError: If configuration file cannot be loaded or is invalid

    Examples:
        >>> config = load_config(Path("disk-scan.yaml"))
        >>> print(config.root)
        /data
    """
    if not config_path.exists():
        msg = (
            f"Configuration file not found: {config_path}\n"
            f"Please create a configuration file at this location."
        )
        raise ConfigurationError(msg)

    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = (
            f"Failed to parse YAML configuration file: {config_path}\n"
            f"YAML parsing error: {e}\n"
            f"Please check the file for syntax errors."
        )
        raise ConfigurationError(msg) from e
    except OSError as e:
        msg = f"Failed to read configuration file: {config_path}\nError: {e}\nPlease check file permissions."
        raise ConfigurationError(msg) from e

    # An empty file means "all defaults"
    if raw_data is None:
        raw_data = {}

    if not isinstance(raw_data, dict):
        msg = (
            f"Invalid configuration file format: {config_path}\n"
            f"Expected YAML dictionary at root level, got: {type(raw_data).__name__}\n"
            f"Configuration file must contain key-value pairs."
        )
        raise ConfigurationError(msg)

    try:
        resolved_data = resolve_env_vars_in_dict(raw_data)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
    except EnvironmentVariableError as e:
        msg = (
            f"Environment variable resolution failed in: {config_path}\n"
            f"{e}\n"
            f"Set the required environment variable before starting the application."
        )
        raise ConfigurationError(msg) from e

    try:
        return ScanConfig.model_validate(resolved_data)
    except ValidationError as e:
        raise ConfigurationError(format_validation_error(e, source=str(config_path))) from e
