from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import List, Optional, Sequence

from loguru import logger
from pygame.math import Vector3

from .agent import AgentState
from .config import InvalidConfiguration, SimParams, SimulationConfig
from .forces import compute_accelerations
from .integrator import integrate
from .math3d import as_tuple, to_vector
from .metrics import StepMetrics, create_metrics
from .neighbors import NeighborSets, find_neighbors
from .rng import DeterministicRng, RandomSource
from .snapshot import Snapshot, SnapshotMetadata


class FlockStatus(str, Enum):
    UNINITIALIZED = "Uninitialized"
    RUNNING = "Running"


@dataclass(slots=True)
class StepResult:
    agents: List[AgentState]
    neighbor_sets: NeighborSets
    accelerations: List[Vector3]


def initialize(
    agent_count: int,
    domain_half_extents: Sequence[float] | Vector3,
    origin: Sequence[float] | Vector3,
    max_speed: float,
    rng: RandomSource,
) -> List[AgentState]:
    """
    Seed `agent_count` agents uniformly inside `origin +- domain_half_extents`.

    Velocities are random unit vectors scaled by `max_speed`. All randomness comes
    from `rng`, so a seeded or stubbed source reproduces the same flock.
    """
    if agent_count < 0:
        raise InvalidConfiguration(f"agent_count must be >= 0, got {agent_count}")
    if max_speed < 0:
        raise InvalidConfiguration(f"max_speed must be >= 0, got {max_speed}")
    half_extents = to_vector(domain_half_extents)
    if min(half_extents.x, half_extents.y, half_extents.z) < 0:
        raise InvalidConfiguration(f"domain_half_extents must be >= 0, got {as_tuple(half_extents)}")
    center = to_vector(origin)
    agents = []
    for _ in range(agent_count):
        position = rng.next_in_box(center, half_extents)
        velocity = rng.next_unit_sphere() * max_speed
        agents.append(AgentState(position=position, velocity=velocity))
    return agents


def advance(
    agents: Sequence[AgentState],
    params: SimParams,
    dt: float,
    cell_size: Optional[float] = None,
) -> StepResult:
    if not dt >= 0 or math.isinf(dt):
        raise ValueError(f"dt must be a finite value >= 0, got {dt}")
    if not agents:
        return StepResult(agents=[], neighbor_sets=[], accelerations=[])
    positions = [agent.position for agent in agents]
    neighbor_sets = find_neighbors(positions, params.nearby_distance, cell_size)
    accelerations = compute_accelerations(agents, neighbor_sets, params)
    next_agents = integrate(agents, accelerations, params, dt)
    return StepResult(agents=next_agents, neighbor_sets=neighbor_sets, accelerations=accelerations)


def step(
    agents: Sequence[AgentState],
    params: SimParams,
    dt: float,
    cell_size: Optional[float] = None,
) -> List[AgentState]:
    return advance(agents, params, dt, cell_size).agents


class Flock:
    def __init__(self, config: SimulationConfig, rng: Optional[RandomSource] = None):
        self._config = config
        self._rng = rng if rng is not None else DeterministicRng(config.seed)
        self._agents: List[AgentState] = []
        self._metrics: StepMetrics | None = None
        self._status = FlockStatus.UNINITIALIZED

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def agents(self) -> List[AgentState]:
        return self._agents

    @property
    def metrics(self) -> StepMetrics | None:
        return self._metrics

    @property
    def status(self) -> FlockStatus:
        return self._status

    def initialize(self) -> None:
        params = self._config.params
        self._agents = initialize(
            self._config.agent_count,
            params.domain_half_extents,
            params.origin,
            params.max_speed,
            self._rng,
        )
        self._metrics = None
        self._status = FlockStatus.RUNNING
        logger.info(
            f"Flock initialized: {len(self._agents)} agents, half extents {params.domain_half_extents}, "
            f"origin {params.origin}, neighbor search {self._config.neighbor_search}"
        )

    def reset(self) -> None:
        reset = getattr(self._rng, "reset", None)
        if reset is not None:
            reset()
        self.initialize()

    def step(self, tick: int, dt: Optional[float] = None) -> StepMetrics:
        if self._status is FlockStatus.UNINITIALIZED:
            raise RuntimeError("Flock.step called before initialize()")
        start = perf_counter()
        config = self._config
        dt = config.time_step if dt is None else dt
        result = advance(self._agents, config.params, dt, config.grid_cell_size)
        self._agents = result.agents
        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = create_metrics(tick, self._agents, result.neighbor_sets, config.params, duration_ms)
        logger.debug(
            f"tick {tick}: {self._metrics.neighbor_links} neighbor links, "
            f"avg speed {self._metrics.average_speed:.3f}, {duration_ms:.2f} ms"
        )
        return self._metrics

    def snapshot(self, tick: int) -> Snapshot:
        config = self._config
        params = config.params
        return Snapshot(
            tick=tick,
            metrics=self._metrics,
            agents=[dict(id=index, **agent.to_dict()) for index, agent in enumerate(self._agents)],
            metadata=SnapshotMetadata(
                domain_half_extents=params.domain_half_extents,
                origin=params.origin,
                sim_dt=config.time_step,
                tick_rate=1.0 / config.time_step,
                seed=config.seed,
                config_version=config.config_version,
            ),
        )
