from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional
import logging
import os

import yaml

from bfvm.errors import ConfigError
from bfvm.tape import CellWidth

logger = logging.getLogger(__name__)

# Environment overrides, applied on top of a config file
ENV_CELL_WIDTH = "BFVM_CELL_WIDTH"
ENV_MAX_CELLS = "BFVM_MAX_CELLS"
ENV_STEP_LIMIT = "BFVM_STEP_LIMIT"
ENV_EOF = "BFVM_EOF"


class EofPolicy(Enum):
    """What ',' does to the current cell when the input is exhausted."""
    UNCHANGED = "unchanged"
    ZERO = "zero"

    @classmethod
    def parse(cls, value: Any) -> "EofPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ConfigError(f"unknown eof policy {value!r} (choose from {choices})") from None


@dataclass(frozen=True)
class VMConfig:
    """Settings for one interpreter.

    max_cells caps the tape (None = unbounded); max_steps cancels a run after
    that many dispatched instructions (None = no budget).
    """
    cell_width: CellWidth = CellWidth.W8
    initial_cells: int = 1
    max_cells: Optional[int] = None
    max_steps: Optional[int] = None
    eof: EofPolicy = EofPolicy.UNCHANGED

    def __post_init__(self):
        object.__setattr__(self, "cell_width", CellWidth.parse(self.cell_width))
        object.__setattr__(self, "eof", EofPolicy.parse(self.eof))
        object.__setattr__(self, "initial_cells", _coerce_int("initial_cells", self.initial_cells, minimum=0))
        object.__setattr__(self, "max_cells", _coerce_optional_int("max_cells", self.max_cells, minimum=1))
        object.__setattr__(self, "max_steps", _coerce_optional_int("max_steps", self.max_steps, minimum=0))

    def with_overrides(self, **changes: Any) -> "VMConfig":
        """Copy with every non-None keyword applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VMConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
        return cls(**dict(data))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cell_width": int(self.cell_width),
            "initial_cells": self.initial_cells,
            "max_cells": self.max_cells,
            "max_steps": self.max_steps,
            "eof": self.eof.value,
        }


def _coerce_int(name: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if number < minimum:
        raise ConfigError(f"{name} must be at least {minimum}, got {number}")
    return number


def _coerce_optional_int(name: str, value: Any, minimum: int) -> Optional[int]:
    if value is None:
        return None
    return _coerce_int(name, value, minimum)


def config_from_env(base: Optional[VMConfig] = None,
                    environ: Optional[Mapping[str, str]] = None) -> VMConfig:
    """Apply BFVM_* environment variables on top of `base`."""
    base = base or VMConfig()
    env = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    if env.get(ENV_CELL_WIDTH):
        overrides["cell_width"] = env[ENV_CELL_WIDTH]
    if env.get(ENV_MAX_CELLS):
        overrides["max_cells"] = env[ENV_MAX_CELLS]
    if env.get(ENV_STEP_LIMIT):
        overrides["max_steps"] = env[ENV_STEP_LIMIT]
    if env.get(ENV_EOF):
        overrides["eof"] = env[ENV_EOF]
    if overrides:
        logger.debug("Environment overrides: %s", overrides)
    return base.with_overrides(**overrides)


def load_config(path: str) -> VMConfig:
    """Load a VMConfig from a YAML file.
    Supported formats:
      1) { vm: { cell_width: 16, max_cells: 30000, ... } }
      2) The same keys at the top level
    An empty file yields the defaults.
    """
    try:
        with open(path, "r") as f:
            text = f.read()
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if data is None:
        return VMConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    if "vm" in data:
        data = data["vm"]
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: 'vm' must be a mapping")

    config = VMConfig.from_mapping(data)
    logger.info("Loaded config from %s: %s", path, config.to_dict())
    return config
