"""Settings model for mindmap-explorer.

Values come from (lowest to highest precedence) the defaults below,
``MINDMAP_*`` environment variables, an optional JSON config file and
explicit keyword overrides.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
from loguru import logger
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.exceptions import ConfigError
from .defaults import (
    DEFAULT_BASE_HEIGHT,
    DEFAULT_DATASET,
    DEFAULT_DURATION,
    DEFAULT_LEVEL_SPACING,
    DEFAULT_NODE_WIDTH,
    DEFAULT_PALETTE,
    DEFAULT_ROOT_COLOR,
    DEFAULT_SCALE_EXTENT,
    DEFAULT_SIBLING_SPACING,
    DEFAULT_VIEWPORT_HEIGHT,
    DEFAULT_VIEWPORT_WIDTH,
    ENV_PREFIX,
    ORIENTATIONS,
    get_default_data_dir,
)


class ExplorerSettings(BaseSettings):
    """Runtime configuration for the explorer engine and CLI."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    data_dir: Path = Field(
        default_factory=get_default_data_dir,
        description="Directory containing <name>.json / <name>.xml datasets",
    )
    default_dataset: str = Field(
        default=DEFAULT_DATASET, description="Dataset loaded when none is named"
    )

    viewport_width: int = Field(default=DEFAULT_VIEWPORT_WIDTH, gt=0)
    viewport_height: int = Field(default=DEFAULT_VIEWPORT_HEIGHT, gt=0)
    duration: float = Field(
        default=DEFAULT_DURATION, ge=0, description="Transition duration in seconds"
    )
    scale_min: float = Field(default=DEFAULT_SCALE_EXTENT[0])
    scale_max: float = Field(default=DEFAULT_SCALE_EXTENT[1])
    focus_scale: float | None = Field(
        default=None, description="Scale used when centering (None keeps current)"
    )

    node_width: float = Field(default=DEFAULT_NODE_WIDTH, gt=0)
    base_height: float = Field(default=DEFAULT_BASE_HEIGHT, gt=0)
    level_spacing: float = Field(default=DEFAULT_LEVEL_SPACING, gt=0)
    sibling_spacing: float = Field(default=DEFAULT_SIBLING_SPACING, gt=0)
    orientation: str = Field(default="horizontal")

    palette: list[str] = Field(default_factory=lambda: list(DEFAULT_PALETTE))
    root_color: str = Field(default=DEFAULT_ROOT_COLOR)

    @field_validator("orientation")
    @classmethod
    def _known_orientation(cls, value: str) -> str:
        if value not in ORIENTATIONS:
            raise ValueError(f"orientation must be one of {', '.join(ORIENTATIONS)}")
        return value

    @field_validator("palette")
    @classmethod
    def _non_empty_palette(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("palette must contain at least one colour")
        return value

    @model_validator(mode="after")
    def _valid_scale_extent(self) -> ExplorerSettings:
        if self.scale_min <= 0:
            raise ValueError("scale_min must be positive")
        if self.scale_min > self.scale_max:
            raise ValueError("scale_min must not exceed scale_max")
        return self

    @property
    def scale_extent(self) -> tuple[float, float]:
        return (self.scale_min, self.scale_max)


def load_settings(config_file: Path | None = None, **overrides: Any) -> ExplorerSettings:
    """Build settings from env, an optional JSON file and overrides.

    Raises:
        ConfigError: If the file cannot be read or a value is invalid
    """
    values: dict[str, Any] = {}
    if config_file is not None:
        try:
            file_values = orjson.loads(Path(config_file).read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            raise ConfigError(
                f"Failed to read configuration {config_file}: {e}",
                context={"path": str(config_file)},
            ) from e
        if not isinstance(file_values, dict):
            raise ConfigError(
                f"Configuration {config_file} must contain a JSON object",
                context={"path": str(config_file)},
            )
        values.update(file_values)
        logger.debug(f"Loaded configuration from {config_file}")

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ExplorerSettings(**values)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration: {e}",
            context={"errors": e.errors(include_url=False)},
        ) from e
