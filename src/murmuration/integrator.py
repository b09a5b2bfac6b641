from __future__ import annotations

from typing import List, Sequence

from pygame.math import Vector3

from .agent import AgentState
from .config import SimParams
from .math3d import clamp_length, safe_normalize


def integrate_agent(agent: AgentState, acceleration: Vector3, params: SimParams, dt: float) -> AgentState:
    scaled_dt = dt * params.time_scale
    velocity = clamp_length(agent.velocity + acceleration * scaled_dt, params.max_speed)
    # Agents always cover max_speed along their heading; a zero velocity stays put.
    heading = safe_normalize(velocity)
    position = agent.position + heading * (scaled_dt * params.max_speed)
    return AgentState(position=position, velocity=velocity)


def integrate(
    agents: Sequence[AgentState],
    accelerations: Sequence[Vector3],
    params: SimParams,
    dt: float,
) -> List[AgentState]:
    """Next state for every agent; the input states are left untouched."""
    if len(agents) != len(accelerations):
        raise ValueError(f"expected {len(agents)} accelerations, got {len(accelerations)}")
    return [integrate_agent(agent, acceleration, params, dt) for agent, acceleration in zip(agents, accelerations)]
