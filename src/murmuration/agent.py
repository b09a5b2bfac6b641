from __future__ import annotations

from dataclasses import dataclass, field

from pygame.math import Vector3


@dataclass(slots=True)
class AgentState:
    position: Vector3 = field(default_factory=Vector3)
    velocity: Vector3 = field(default_factory=Vector3)

    def copy(self) -> "AgentState":
        return AgentState(position=Vector3(self.position), velocity=Vector3(self.velocity))

    def to_dict(self) -> dict[str, float]:
        position = self.position
        velocity = self.velocity
        return {
            "x": position.x,
            "y": position.y,
            "z": position.z,
            "vx": velocity.x,
            "vy": velocity.y,
            "vz": velocity.z,
            "speed": velocity.length(),
        }
