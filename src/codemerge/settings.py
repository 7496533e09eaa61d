from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from codemerge.config import COPY_BUFFER_SIZE, DEFAULT_OUTPUT, EXCLUDED_DIRS
from codemerge.exceptions import ConfigError


class Settings(BaseModel):
    """Configuration settings for one codemerge run."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    root: Path = Field(default_factory=Path.cwd, description="Directory tree to scan.")
    output: Path = Field(default=Path(DEFAULT_OUTPUT), description="Merged output file.")
    exclude_dir: list[str] = Field(
        default_factory=list,
        description="Extra directory names to prune.",
    )
    dedupe: bool = Field(
        default=False,
        description="Merge a canonical path only once even if reached through several links.",
    )
    no_progress: bool = Field(default=False, description="Do not draw the progress bar.")
    log_file: str = Field(default="", description="Log file path.")
    buffer_size: int = Field(default=COPY_BUFFER_SIZE, gt=0, description="Copy buffer size in bytes.")

    @property
    def excluded_dirs(self) -> frozenset[str]:
        return EXCLUDED_DIRS | frozenset(self.exclude_dir)


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML mapping of settings.

    Args:
        path (Path): the YAML file to read

    Raises:
        ConfigError: if the file is unreadable, malformed, or not a mapping

    Returns:
        dict[str, Any]: the raw settings values
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(path=path, reason=str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(path=path, reason="top-level value must be a mapping")
    return data


def build_settings(values: dict[str, Any], config: Path | None = None) -> Settings:
    """Build Settings from a YAML file overlaid with explicit values.

    Args:
        values (dict[str, Any]): explicitly given values; None entries are ignored
        config (Path | None, optional): YAML file providing defaults. Defaults to None.

    Raises:
        ConfigError: if the file cannot be loaded or the merged values are invalid

    Returns:
        Settings: the validated settings
    """
    merged: dict[str, Any] = load_config_file(config) if config else {}
    for key, value in values.items():
        if value is None:
            continue
        if key == "exclude_dir":
            configured = merged.get(key, [])
            if not isinstance(configured, list):
                raise ConfigError(path=config or Path("<command line>"), reason="exclude_dir must be a list")
            merged[key] = [*configured, *value]
        else:
            merged[key] = value
    try:
        return Settings(**merged)
    except ValidationError as e:
        raise ConfigError(path=config or Path("<command line>"), reason=str(e)) from e
