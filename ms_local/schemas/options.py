"""Pydantic schemas for provider configuration and per-call placement options."""

import codecs
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from ms_local import config
from ms_local.core.exceptions import InvalidPlacement


def _check_encoding(value: str | None) -> str | None:
    if value is not None:
        try:
            codecs.lookup(value)
        except LookupError as err:
            raise ValueError(f"unknown encoding {value!r}") from err
    return value


class StorageConfig(BaseModel):
    """Provider configuration. Fixed for the provider's lifetime."""

    base_directory: Path = config.BASE_DIRECTORY
    create_directories: bool = config.CREATE_DIRECTORIES
    flatten_directories: bool = config.FLATTEN_DIRECTORIES
    flatten_separator: str = config.FLATTEN_SEPARATOR
    confine_to_base_directory: bool = config.CONFINE_TO_BASE_DIRECTORY
    read_chunk_size: int = Field(config.READ_CHUNK_SIZE, gt=0)
    default_encoding: str = config.DEFAULT_ENCODING
    default_mode: int = Field(config.DEFAULT_FILE_MODE, ge=0, le=0o7777)

    model_config = {"frozen": True}

    @field_validator("default_encoding")
    @classmethod
    def _known_default_encoding(cls, value: str) -> str:
        return _check_encoding(value)

    @field_validator("base_directory")
    @classmethod
    def _absolute_base(cls, value: Path) -> Path:
        return Path(os.path.abspath(value))

    @field_validator("flatten_separator")
    @classmethod
    def _valid_separator(cls, value: str) -> str:
        if not value or "/" in value:
            raise ValueError("flatten_separator must be non-empty and must not contain '/'")
        return value

    @classmethod
    def from_env(cls, **overrides: Any) -> "StorageConfig":
        """Build a config from the MS_LOCAL_* environment, with explicit overrides."""
        values: dict[str, Any] = {
            "base_directory": config.BASE_DIRECTORY,
            "create_directories": config.CREATE_DIRECTORIES,
            "flatten_directories": config.FLATTEN_DIRECTORIES,
            "flatten_separator": config.FLATTEN_SEPARATOR,
            "confine_to_base_directory": config.CONFINE_TO_BASE_DIRECTORY,
            "read_chunk_size": config.READ_CHUNK_SIZE,
            "default_encoding": config.DEFAULT_ENCODING,
            "default_mode": config.DEFAULT_FILE_MODE,
        }
        values.update(overrides)
        return cls(**values)


class PlacementOptions(BaseModel):
    """Where and how a single write stores its object. Unset fields fall back to the config."""

    name: str | None = None
    path: str = ""
    flatten: bool | None = None
    encoding: str | None = None
    mode: int | None = Field(None, ge=0, le=0o7777)

    # Managers send one options bag to every provider; keys for others are dropped
    model_config = {"extra": "ignore"}

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str | None) -> str | None:
        return _check_encoding(value)

    @field_validator("path", mode="before")
    @classmethod
    def _none_path(cls, value: Any) -> Any:
        return "" if value is None else value


class ResolvedPlacement(BaseModel):
    """Placement options with every default applied."""

    name: str
    path: str
    flatten: bool
    separator: str
    encoding: str
    mode: int

    model_config = {"frozen": True}


PlacementInput = PlacementOptions | Mapping[str, Any] | None


def resolve_placement(
    storage_config: StorageConfig,
    options: PlacementInput = None,
    **overrides: Any,
) -> ResolvedPlacement:
    """
    Merge call-level options over the provider config.
    Precedence: keyword overrides > options > storage_config > built-in defaults.
    """
    if options is None:
        values: dict[str, Any] = {}
    elif isinstance(options, PlacementOptions):
        values = options.model_dump(exclude_unset=True)
    else:
        values = dict(options)
    values.update(overrides)
    try:
        placement = PlacementOptions(**values)
    except ValidationError as err:
        raise InvalidPlacement(
            f"Invalid placement options: {err.error_count()} error(s)",
            {"errors": str(err)},
        ) from err

    return ResolvedPlacement(
        name=placement.name or "",
        path=placement.path,
        flatten=(
            storage_config.flatten_directories if placement.flatten is None else placement.flatten
        ),
        separator=storage_config.flatten_separator,
        encoding=placement.encoding or storage_config.default_encoding,
        mode=storage_config.default_mode if placement.mode is None else placement.mode,
    )
