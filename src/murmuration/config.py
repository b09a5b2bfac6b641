from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

NEIGHBOR_SEARCH_MODES = ("grid", "brute_force")


class InvalidConfiguration(ValueError):
    """Raised when simulation parameters cannot be used to step a flock."""


def _triple(name: str, value: Any) -> tuple[float, float, float]:
    if not isinstance(value, (tuple, list)) or len(value) != 3:
        raise InvalidConfiguration(f"{name} must be a sequence of three numbers, got {value!r}")
    try:
        return (float(value[0]), float(value[1]), float(value[2]))
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"{name} must contain only numbers, got {value!r}") from exc


def _check_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value!r}")


def _number(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}") from exc
    _check_finite(name, number)
    return number


def _integer(name: str, value: Any) -> int:
    # bool is an int subclass and floats like 2.5 would truncate silently.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    return value


@dataclass
class SimParams:
    domain_half_extents: tuple[float, float, float] = (1000.0, 1000.0, 1000.0)
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    nearby_distance: float = 300.0
    separation_distance: float = 100.0
    cohesion_strength: float = 1.0
    separation_strength: float = 1.0
    alignment_strength: float = 1.0
    # Negative disables the boundary force entirely.
    border_force_strength: float = 50.0
    max_speed: float = 300.0
    time_scale: float = 1.0

    def __post_init__(self) -> None:
        self.domain_half_extents = _triple("domain_half_extents", self.domain_half_extents)
        self.origin = _triple("origin", self.origin)
        for name in (
            "nearby_distance",
            "separation_distance",
            "cohesion_strength",
            "separation_strength",
            "alignment_strength",
            "border_force_strength",
            "max_speed",
            "time_scale",
        ):
            setattr(self, name, _number(name, getattr(self, name)))
        for axis, extent in zip("xyz", self.domain_half_extents):
            _check_finite(f"domain_half_extents.{axis}", extent)
            if extent < 0:
                raise InvalidConfiguration(f"domain_half_extents.{axis} must be >= 0, got {extent}")
        for axis, coord in zip("xyz", self.origin):
            _check_finite(f"origin.{axis}", coord)
        if self.max_speed < 0:
            raise InvalidConfiguration(f"max_speed must be >= 0, got {self.max_speed}")
        if self.nearby_distance < 0:
            raise InvalidConfiguration(f"nearby_distance must be >= 0, got {self.nearby_distance}")
        if self.separation_distance < 0:
            raise InvalidConfiguration(f"separation_distance must be >= 0, got {self.separation_distance}")
        if self.time_scale < 0:
            raise InvalidConfiguration(f"time_scale must be >= 0, got {self.time_scale}")
        if self.separation_distance > self.nearby_distance:
            logger.warning(
                f"separation_distance ({self.separation_distance}) exceeds nearby_distance "
                f"({self.nearby_distance}); separation only sees agents inside nearby_distance"
            )

    @property
    def boundary_enabled(self) -> bool:
        return self.border_force_strength >= 0


@dataclass
class SimulationConfig:
    agent_count: int = 100
    time_step: float = 1.0 / 60.0
    seed: int = 42
    neighbor_search: str = "grid"
    # 0 means "use nearby_distance".
    cell_size: float = 0.0
    config_version: str = "v1"
    params: SimParams = field(default_factory=SimParams)

    def __post_init__(self) -> None:
        self.agent_count = _integer("agent_count", self.agent_count)
        self.seed = _integer("seed", self.seed)
        self.time_step = _number("time_step", self.time_step)
        self.cell_size = _number("cell_size", self.cell_size)
        if not isinstance(self.params, SimParams):
            raise InvalidConfiguration(f"params must be a SimParams, got {type(self.params).__name__}")
        if self.agent_count < 0:
            raise InvalidConfiguration(f"agent_count must be >= 0, got {self.agent_count}")
        if not self.time_step > 0:
            raise InvalidConfiguration(f"time_step must be > 0, got {self.time_step}")
        if self.neighbor_search not in NEIGHBOR_SEARCH_MODES:
            raise InvalidConfiguration(
                f"neighbor_search must be one of {', '.join(NEIGHBOR_SEARCH_MODES)}, got {self.neighbor_search!r}"
            )
        if self.cell_size < 0:
            raise InvalidConfiguration(f"cell_size must be >= 0, got {self.cell_size}")

    @property
    def grid_cell_size(self) -> float | None:
        """Cell size for the spatial grid, or None when brute force search is selected."""
        if self.neighbor_search == "brute_force":
            return None
        if self.cell_size > 0:
            return self.cell_size
        if self.params.nearby_distance > 0:
            return self.params.nearby_distance
        return None

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text())
        return load_config(data or {})


def _reject_unknown(section: str, raw: dict, allowed: set[str]) -> None:
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise InvalidConfiguration(f"unknown {section} keys: {', '.join(unknown)}")


def load_params(raw: dict, base: SimParams | None = None) -> SimParams:
    """Build SimParams from a mapping; keys missing from `raw` come from `base` or the defaults."""
    if not isinstance(raw, dict):
        raise InvalidConfiguration("params must be a mapping")
    _reject_unknown("params", raw, {f.name for f in fields(SimParams)})
    values = asdict(base) if base is not None else {}
    values.update(raw)
    return SimParams(**values)


def load_config(raw: dict) -> SimulationConfig:
    if not isinstance(raw, dict):
        raise InvalidConfiguration(f"configuration must be a mapping, got {type(raw).__name__}")
    sim_fields = {f.name for f in fields(SimulationConfig)}
    _reject_unknown("simulation", raw, sim_fields)

    params = load_params(raw.get("params", {}) or {})
    sim_values = {k: v for k, v in raw.items() if k != "params"}
    return SimulationConfig(params=params, **sim_values)
