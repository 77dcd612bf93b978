from __future__ import annotations

from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field

from workcal import ARGS_DIR
from workcal.errors import ConfigError
from workcal.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# ReservationsConfig (args/reservations.yaml)
# =============================================================================

class BatchOptions(BaseModel):
    model_config = ConfigDict(extra="allow")
    batch_size: int = Field(default=10, ge=1)
    batch_delay_ms: int = Field(default=1000, ge=0)
    max_retries: int = Field(default=3, ge=1)
    initial_delay_ms: int = Field(default=1000, ge=0)


class ReservationsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    batch: BatchOptions = Field(default_factory=BatchOptions)
    # Raw entries; the runner turns each one into its own request so that a
    # malformed entry fails alone instead of failing the file.
    reservations: list[Any] = Field(default_factory=list)


# =============================================================================
# Loader
# =============================================================================

_CONFIG_MAP: dict[str, type[BaseModel]] = {
    "reservations": ReservationsConfig,
}


def load_and_validate(config_name: str, model_class: type[BaseModel] | None = None, path=None) -> BaseModel:
    """
    Load a YAML config file into its model.

    A missing file yields the model defaults. A file that cannot be parsed, or
    whose contents fail validation, raises ConfigError.
    """
    if model_class is None:
        model_class = _CONFIG_MAP.get(config_name)
        if model_class is None:
            raise ValueError(f"Unknown config: {config_name}. Available: {list(_CONFIG_MAP.keys())}")

    yaml_path = path if path is not None else ARGS_DIR / f"{config_name}.yaml"

    if not yaml_path.exists():
        logger.info(f"No {config_name} config at {yaml_path}, using defaults")
        return model_class()

    try:
        with open(yaml_path) as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read {config_name} config {yaml_path}: {e}") from e

    try:
        return model_class.model_validate(raw or {})
    except pydantic.ValidationError as e:
        raise ConfigError(f"Invalid {config_name} config {yaml_path}: {e}") from e
