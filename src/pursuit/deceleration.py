from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pursuit.types import VelocityCommand

# (command, distance_to_target, last_distance_to_target, elapsed_s, movement_speed, turn_speed)
DecelerationStrategy = Callable[[VelocityCommand, float, float, float, float, float], None]


def default_deceleration(
    cmd: VelocityCommand,
    distance_to_target: float,
    last_distance_to_target: float,
    elapsed: float,
    movement_speed: float,
    turn_speed: float,
) -> None:
    """Scale by the configured speeds only; no distance-based easing."""
    cmd.scale(movement_speed, turn_speed)


@dataclass
class DistanceRampDeceleration:
    """
    Linear ramp on translation inside `ramp_distance` of the target, never
    below `min_scale` of the configured movement speed. Rotation is scaled by
    turn speed only, so point turns keep their authority.
    """

    ramp_distance: float = 1.0
    min_scale: float = 0.2

    def __call__(
        self,
        cmd: VelocityCommand,
        distance_to_target: float,
        last_distance_to_target: float,
        elapsed: float,
        movement_speed: float,
        turn_speed: float,
    ) -> None:
        if self.ramp_distance > 0.0 and distance_to_target < self.ramp_distance:
            ramp = max(self.min_scale, distance_to_target / self.ramp_distance)
        else:
            ramp = 1.0
        cmd.scale(movement_speed * ramp, turn_speed)
