from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .metrics import StepMetrics


@dataclass(slots=True)
class SnapshotMetadata:
    domain_half_extents: tuple[float, float, float]
    origin: tuple[float, float, float]
    sim_dt: float
    tick_rate: float
    seed: int
    config_version: str


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: Optional[StepMetrics]
    agents: List[Dict[str, Any]]
    metadata: SnapshotMetadata
