# models.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple


class ConfigError(ValueError):
    """Fatal configuration problem detected before the first tick."""


class State(Enum):
    NULL=auto(); SEEKING=auto(); ROTATING=auto(); TRANSFERRING=auto(); DONE=auto()


class Policy(Enum):
    FIFO=auto(); SSTF=auto(); SATF=auto(); BSATF=auto()

    @classmethod
    def parse(cls, name: str) -> "Policy":
        try:
            return cls[str(name).upper()]
        except KeyError:
            choices = "|".join(p.name for p in cls)
            raise ConfigError(f"Policy ({name}) not implemented; expected one of {choices}") from None


@dataclass(frozen=True)
class Block:
    name: int
    track: int
    angle: float          # start of data, 180-degree layout shift applied


@dataclass(frozen=True)
class TrackInfo:
    track: int
    radius: float         # center x of the track
    width: float
    skew: int             # multiplier applied to the block step
    first_block: Optional[int] = None
    last_block: Optional[int] = None

    @property
    def empty(self) -> bool:
        return self.first_block is None


@dataclass(eq=False)
class Request:
    """
    One queued I/O. `state` is attached and driven by the lifecycle machine
    (see mechanics.new_lifecycle_machine); the begin ticks are stamped on
    every transition.
    """
    block: int
    index: int
    seek_begin: Optional[int] = None
    rotate_begin: Optional[int] = None
    transfer_begin: Optional[int] = None
    done_at: Optional[int] = None
    history: List[Tuple[State, int]] = field(default_factory=list)

    def stamp_phase(self, tick: int):
        self.history.append((self.state, tick))
        if self.state is State.SEEKING:
            self.seek_begin = tick
        elif self.state is State.ROTATING:
            self.rotate_begin = tick
        elif self.state is State.TRANSFERRING:
            self.transfer_begin = tick
        elif self.state is State.DONE:
            self.done_at = tick

    def to_stats(self) -> "RequestStats":
        return RequestStats(block=self.block, index=self.index,
                            seek=self.rotate_begin - self.seek_begin,
                            rotate=self.transfer_begin - self.rotate_begin,
                            transfer=self.done_at - self.transfer_begin,
                            total=self.done_at - self.seek_begin,
                            seek_begin=self.seek_begin, rotate_begin=self.rotate_begin,
                            transfer_begin=self.transfer_begin, done_at=self.done_at)

    def __repr__(self):
        st = getattr(self, "state", None)
        return f"Request(block={self.block}, index={self.index}, state={st.name if st else None})"


@dataclass(frozen=True)
class Estimate:
    seek: float
    rotate: float
    transfer: float

    @property
    def total(self) -> float:
        return self.seek + self.rotate + self.transfer


@dataclass(frozen=True)
class RequestStats:
    block: int
    index: int
    seek: int
    rotate: int
    transfer: int
    total: int
    seek_begin: int
    rotate_begin: int
    transfer_begin: int
    done_at: int


@dataclass
class Totals:
    seek: int = 0
    rotate: int = 0
    transfer: int = 0
    total: int = 0

    def add(self, s: RequestStats):
        self.seek += s.seek; self.rotate += s.rotate; self.transfer += s.transfer


@dataclass
class RunResult:
    completions: List[RequestStats]
    totals: Totals
    requests: List[int]
    late_requests: List[int]
