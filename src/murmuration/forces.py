from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence

from pygame.math import Vector3

from .agent import AgentState
from .config import SimParams
from .math3d import safe_normalize


@dataclass(slots=True)
class ForceBreakdown:
    cohesion: Vector3 = field(default_factory=Vector3)
    separation: Vector3 = field(default_factory=Vector3)
    alignment: Vector3 = field(default_factory=Vector3)
    boundary: Vector3 = field(default_factory=Vector3)

    def combine(self, params: SimParams) -> Vector3:
        # Boundary is already scaled by border_force_strength.
        return (
            self.cohesion * params.cohesion_strength
            + self.separation * params.separation_strength
            + self.alignment * params.alignment_strength
            + self.boundary
        )


def cohesion(agents: Sequence[AgentState], index: int, neighbors: Sequence[int]) -> Vector3:
    if not neighbors:
        return Vector3()
    sum_x = 0.0
    sum_y = 0.0
    sum_z = 0.0
    for other in neighbors:
        pos = agents[other].position
        sum_x += pos.x
        sum_y += pos.y
        sum_z += pos.z
    count = len(neighbors)
    position = agents[index].position
    toward = Vector3(sum_x / count - position.x, sum_y / count - position.y, sum_z / count - position.z)
    return safe_normalize(toward)


def separation(
    agents: Sequence[AgentState],
    index: int,
    neighbors: Sequence[int],
    separation_distance: float,
    max_speed: float,
) -> Vector3:
    """
    Inverse-distance push away from neighbors closer than `separation_distance`.

    Each close neighbor contributes its unit offset divided by its distance, so closer
    agents push harder. The summed push is rescaled to `max_speed`. Neighbors sharing
    the agent's exact position have no direction and contribute nothing.
    """
    if not neighbors:
        return Vector3()
    position = agents[index].position
    limit_sq = separation_distance * separation_distance
    accum_x = 0.0
    accum_y = 0.0
    accum_z = 0.0
    for other in neighbors:
        pos = agents[other].position
        away_x = position.x - pos.x
        away_y = position.y - pos.y
        away_z = position.z - pos.z
        dist_sq = away_x * away_x + away_y * away_y + away_z * away_z
        if dist_sq >= limit_sq or dist_sq == 0.0:
            continue
        # normalize(away) / distance == away / distance^2
        inv = 1.0 / dist_sq
        accum_x += away_x * inv
        accum_y += away_y * inv
        accum_z += away_z * inv
    push = safe_normalize(Vector3(accum_x, accum_y, accum_z))
    return push * max_speed


def alignment(agents: Sequence[AgentState], index: int, neighbors: Sequence[int]) -> Vector3:
    if not neighbors:
        return Vector3()
    sum_x = 0.0
    sum_y = 0.0
    sum_z = 0.0
    for other in neighbors:
        vel = agents[other].velocity
        sum_x += vel.x
        sum_y += vel.y
        sum_z += vel.z
    count = len(neighbors)
    velocity = agents[index].velocity
    return Vector3(sum_x / count - velocity.x, sum_y / count - velocity.y, sum_z / count - velocity.z)


def _axis_push(offset: float, half_extent: float, strength: float) -> float:
    if offset < -half_extent:
        return strength
    if offset > half_extent:
        return -strength
    return 0.0


def boundary(position: Vector3, params: SimParams) -> Vector3:
    if not params.boundary_enabled:
        return Vector3()
    strength = params.border_force_strength
    half_x, half_y, half_z = params.domain_half_extents
    origin_x, origin_y, origin_z = params.origin
    return Vector3(
        _axis_push(position.x - origin_x, half_x, strength),
        _axis_push(position.y - origin_y, half_y, strength),
        _axis_push(position.z - origin_z, half_z, strength),
    )


def compute_forces(
    agents: Sequence[AgentState],
    index: int,
    neighbors: Sequence[int],
    params: SimParams,
) -> ForceBreakdown:
    return ForceBreakdown(
        cohesion=cohesion(agents, index, neighbors),
        separation=separation(agents, index, neighbors, params.separation_distance, params.max_speed),
        alignment=alignment(agents, index, neighbors),
        boundary=boundary(agents[index].position, params),
    )


def compute_accelerations(
    agents: Sequence[AgentState],
    neighbor_sets: Sequence[Sequence[int]],
    params: SimParams,
) -> List[Vector3]:
    return [
        compute_forces(agents, index, neighbor_sets[index], params).combine(params)
        for index in range(len(agents))
    ]


def is_outside_domain(position: Vector3, params: SimParams) -> bool:
    origin_x, origin_y, origin_z = params.origin
    half_x, half_y, half_z = params.domain_half_extents
    return (
        math.fabs(position.x - origin_x) > half_x
        or math.fabs(position.y - origin_y) > half_y
        or math.fabs(position.z - origin_z) > half_z
    )
