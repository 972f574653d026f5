# geometry.py
# Block -> (track, angle) layout for a three-track platter.
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Tuple

from models import Block, ConfigError, TrackInfo

logger = logging.getLogger(__name__)

NUM_TRACKS = 3
TRACK_WIDTH = 40.0
OUTER_RADIUS = 140.0
LAYOUT_SHIFT_DEG = 180.0
# skew multiplier per track, outermost first
TRACK_SKEW_FACTOR = (0, 1, 2)


def parse_zoning(zoning: str) -> List[int]:
    """
    "30,30,30" -> per-track block half widths [15, 15, 15] (degrees).
    A block spans twice its half width, so each zoning value is the block step.
    """
    parts = [p.strip() for p in str(zoning).split(",")]
    if len(parts) != NUM_TRACKS:
        raise ConfigError(f"Zoning must have exactly {NUM_TRACKS} values, got {len(parts)} ({zoning!r})")
    halves = []
    for i, p in enumerate(parts):
        try:
            z = int(p)
        except ValueError:
            raise ConfigError(f"Zoning value {i} ({p!r}) is not an integer") from None
        if z // 2 < 1:
            raise ConfigError(f"Zoning value {i} ({z}) must be at least 2 degrees per block")
        halves.append(z // 2)
    return halves


def check_seek_speed(seek_speed: float, track_width: float = TRACK_WIDTH):
    if seek_speed <= 0:
        raise ConfigError(f"Seek speed ({seek_speed}) must be positive")
    if seek_speed > 1 and track_width % seek_speed != 0:
        raise ConfigError(f"Seek speed ({seek_speed}) must divide evenly into track width ({track_width:g})")


class DiskGeometry:
    def __init__(self, blocks: List[Block], tracks: List[TrackInfo], half_widths: List[int]):
        self.blocks = blocks
        self.tracks = tracks
        self._half = list(half_widths)
        self._by_name: Dict[int, Block] = {b.name: b for b in blocks}
        self.max_block = blocks[-1].name if blocks else -1

    @classmethod
    def build(cls, zoning: str, skew: int, seek_speed: float = 1.0) -> "DiskGeometry":
        check_seek_speed(seek_speed)
        halves = parse_zoning(zoning)
        for i, h in enumerate(halves):
            logger.debug("z %d %d", i, 2 * h)

        raw: List[Tuple[int, int, float]] = []      # (name, track, raw angle)
        ranges: List[Tuple[Optional[int], Optional[int]]] = []
        next_name = 0
        for track in range(NUM_TRACKS):
            step = 2 * halves[track]
            shift = step * TRACK_SKEW_FACTOR[track] * int(skew)
            first = next_name
            for a in range(0, 360, step):
                raw.append((next_name, track, float(a + shift)))
                logger.debug("%d %d %d %d", track, shift, step, next_name)
                next_name += 1
            ranges.append((first, next_name - 1) if next_name > first else (None, None))

        blocks = [Block(name=n, track=t, angle=(a + LAYOUT_SHIFT_DEG) % 360.0) for n, t, a in raw]
        tracks = []
        for track in range(NUM_TRACKS):
            first, last = ranges[track]
            tracks.append(TrackInfo(track=track,
                                    radius=OUTER_RADIUS - track * TRACK_WIDTH,
                                    width=TRACK_WIDTH,
                                    skew=TRACK_SKEW_FACTOR[track] * int(skew),
                                    first_block=first, last_block=last))
        geo = cls(blocks, tracks, halves)
        logger.debug("[GEOM] %d blocks, max_block=%d", len(blocks), geo.max_block)
        return geo

    # ---- lookups ----
    def block(self, name: int) -> Block:
        return self._by_name[name]

    def track_of(self, name: int) -> int:
        return self._by_name[name].track

    def angle_of(self, name: int) -> float:
        return self._by_name[name].angle

    def half_width(self, track: int) -> int:
        return self._half[track]

    def track_range(self, track: int) -> Tuple[Optional[int], Optional[int]]:
        t = self.tracks[track]
        return t.first_block, t.last_block

    def arm_x(self, track: int) -> float:
        """x1 of the arm when centered over `track`."""
        t = self.tracks[track]
        return t.radius - t.width / 2.0

    def layout_rows(self) -> List[Dict[str, float]]:
        return [{"block": b.name, "track": b.track, "angle": b.angle,
                 "half_width": self._half[b.track]} for b in self.blocks]
