# mechanics.py
# Physical state advanced one tick at a time: arm (seek) + platter (rotation),
# and the per-request lifecycle NULL -> SEEKING -> ROTATING -> TRANSFERRING -> DONE.
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from transitions import Machine

from models import State

FULL_CIRCLE = 360.0

REQUEST_TRANSITIONS = [
    {"trigger": "seek",     "source": State.NULL,         "dest": State.SEEKING},
    {"trigger": "rotate",   "source": State.SEEKING,      "dest": State.ROTATING},
    {"trigger": "transfer", "source": State.ROTATING,     "dest": State.TRANSFERRING},
    {"trigger": "complete", "source": State.TRANSFERRING, "dest": State.DONE},
]


def new_lifecycle_machine() -> Machine:
    """
    One machine shared by all requests (add_model per request). No auto
    `to_<state>` triggers, so a request can only move forward one phase at a
    time; anything else raises transitions.core.MachineError.
    Every trigger is called with tick=<clock>; Request.stamp_phase records it.
    """
    return Machine(model=None, states=State, transitions=REQUEST_TRANSITIONS,
                   initial=State.NULL, auto_transitions=False,
                   after_state_change="stamp_phase")


def forward_arc(frm: float, to: float) -> float:
    """Rotation needed to carry angle `frm` onto `to`, in [0, 360)."""
    return (to - frm) % FULL_CIRCLE


def shortest_arc(a1: float, a2: float) -> float:
    v = abs(a1 - a2)
    if v > 180.0:
        v = FULL_CIRCLE - v
    return v


@dataclass
class Platter:
    rotate_speed: float
    epsilon: float = 0.0001
    angle: float = 0.0

    def advance(self):
        self.angle += self.rotate_speed
        while self.angle >= FULL_CIRCLE:
            self.angle -= FULL_CIRCLE

    def radially_close(self, target: float) -> bool:
        # tolerance of one tick of rotation; exact matches can fall between ticks
        return shortest_arc(self.angle, target) < (self.rotate_speed + self.epsilon)


@dataclass
class Arm:
    track: int
    x1: float
    width: float
    speed_base: float
    speed: float = 0.0
    target_track: Optional[int] = None
    target_x1: Optional[float] = None

    @property
    def x2(self) -> float:
        return self.x1 + self.width

    @property
    def seeking(self) -> bool:
        return self.target_track is not None

    def plan(self, track: int, target_x1: float):
        self.target_track = track
        self.target_x1 = target_x1
        self.speed = self.speed_base if target_x1 >= self.x1 else -self.speed_base

    def step(self) -> bool:
        """Move one tick; True once the target is reached (x1 snapped onto it)."""
        if not self.seeking:
            return True
        self.x1 += self.speed
        if (self.speed > 0.0 and self.x1 >= self.target_x1) or (self.speed < 0.0 and self.x1 <= self.target_x1):
            self.x1 = self.target_x1
            self.track = self.target_track
            self.target_track = None
            self.target_x1 = None
            return True
        return False
