from __future__ import annotations

import math
from dataclasses import dataclass


def _clamp(v: float, lo: float, hi: float) -> float:
    return hi if v > hi else lo if v < lo else v


@dataclass
class HolonomicParams:
    max_speed: float = 1.0  # m/s at |command| == 1
    max_turn_rate: float = 2.0  # rad/s at |angular| == 1
    dt: float = 0.02  # s per drive() call


class Holonomic2D:
    """
    Kinematic holonomic (mecanum-style) base taking robot-centric commands.

    Doubles as the pose source and drive actuator for Path's automatic mode:
    every drive() call integrates one dt step and advances the simulated
    clock, so pass `robot.clock` to Path to keep timeouts in sim time.
    """

    def __init__(self, params: HolonomicParams | None = None) -> None:
        self.p = params or HolonomicParams()
        self.reset()

    def reset(self, x: float = 0.0, y: float = 0.0, heading: float = 0.0) -> None:
        self.x, self.y, self.heading = x, y, heading
        self.t = 0.0
        self.stopped = False

    def clock(self) -> float:
        return self.t

    def state(self) -> tuple[float, float, float]:
        return self.x, self.y, self.heading

    def current_pose(self) -> tuple[float, float, float]:
        return self.state()

    def step(
        self, dt: float, lateral: float, longitudinal: float, angular: float
    ) -> tuple[float, float, float]:
        lateral = _clamp(lateral, -1.0, 1.0)
        longitudinal = _clamp(longitudinal, -1.0, 1.0)
        angular = _clamp(angular, -1.0, 1.0)
        c, s = math.cos(self.heading), math.sin(self.heading)
        # forward is (c, s), right-hand side is (s, -c)
        vx = self.p.max_speed * (longitudinal * c + lateral * s)
        vy = self.p.max_speed * (longitudinal * s - lateral * c)
        self.x += vx * dt
        self.y += vy * dt
        self.heading = math.atan2(
            math.sin(self.heading + angular * self.p.max_turn_rate * dt),
            math.cos(self.heading + angular * self.p.max_turn_rate * dt),
        )
        self.t += dt
        return self.state()

    def drive(self, lateral: float, longitudinal: float, angular: float) -> None:
        self.stopped = False
        self.step(self.p.dt, lateral, longitudinal, angular)

    def stop(self) -> None:
        self.stopped = True
