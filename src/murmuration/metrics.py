from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .agent import AgentState
from .config import SimParams
from .forces import is_outside_domain


@dataclass(slots=True)
class StepMetrics:
    tick: int
    agent_count: int
    neighbor_links: int
    average_neighbors: float
    average_speed: float
    max_speed: float
    outside_domain: int
    tick_duration_ms: float = 0.0


def create_metrics(
    tick: int,
    agents: Sequence[AgentState],
    neighbor_sets: Sequence[Sequence[int]],
    params: SimParams,
    duration_ms: float,
) -> StepMetrics:
    count = len(agents)
    neighbor_links = sum(len(neighbors) for neighbors in neighbor_sets)
    speed_sum = 0.0
    max_speed = 0.0
    outside = 0
    for agent in agents:
        speed = agent.velocity.length()
        speed_sum += speed
        if speed > max_speed:
            max_speed = speed
        if is_outside_domain(agent.position, params):
            outside += 1
    return StepMetrics(
        tick=tick,
        agent_count=count,
        neighbor_links=neighbor_links,
        average_neighbors=neighbor_links / count if count else 0.0,
        average_speed=speed_sum / count if count else 0.0,
        max_speed=max_speed,
        outside_domain=outside,
        tick_duration_ms=duration_ms,
    )
