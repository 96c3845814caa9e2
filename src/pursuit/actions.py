from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable


class TriggeredAction(ABC):
    """Periodic side job ticked by Path.loop on every call, in registration order."""

    @abstractmethod
    def tick(self) -> None:
        """Called once per engine step."""


class ConditionalAction(TriggeredAction):
    """
    Runs `action` on every tick where `condition()` is true, or only the first
    time when `once` is set.

        path.add_triggered_actions(ConditionalAction(lambda: arm.ready(), arm.raise_, once=True))
    """

    def __init__(
        self, condition: Callable[[], bool], action: Callable[[], None], once: bool = False
    ) -> None:
        self.condition = condition
        self.action = action
        self.once = once
        self.fired = 0

    def tick(self) -> None:
        if self.once and self.fired:
            return
        if self.condition():
            self.action()
            self.fired += 1

    def reset(self) -> None:
        self.fired = 0
