# scheduler.py (picks the next request whenever the arm goes idle)
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from geometry import DiskGeometry
from mechanics import Arm, Platter, forward_arc
from models import Estimate, Policy, Request, State

logger = logging.getLogger(__name__)


class SchedWindow:
    """
    How many head-of-queue requests SATF/SSTF may look at.
    - window -1           : whole queue, never changes
    - fair_window unset   : +1 per completion until it covers the queue
    - fair_window w (BSATF): +w each time the completion count hits a multiple of w
    """
    def __init__(self, window: int, fair_window: int = -1):
        self.current = int(window)
        self.fair = int(fair_window)

    @property
    def unbounded(self) -> bool:
        return self.current <= -1

    def on_complete(self, queue_len: int):
        if self.fair == -1 and 0 < self.current < queue_len:
            self.current += 1

    def visible(self, queue_len: int, completed: int) -> int:
        if self.unbounded:
            return queue_len
        if self.fair != -1 and completed > 0 and completed % self.fair == 0:
            self.current += self.fair
            logger.debug("[WINDOW] batch boundary at %d completions -> window %d", completed, self.current)
        return min(self.current, queue_len)


class Scheduler:
    def __init__(self, policy: Policy, geometry: DiskGeometry, window: SchedWindow):
        self.policy = policy
        self.geo = geometry
        self.window = window
        self.last_estimate: Optional[Estimate] = None

    def estimate(self, req: Request, arm: Arm, platter: Platter) -> Estimate:
        track = self.geo.track_of(req.block)
        half = self.geo.half_width(track)
        rs = platter.rotate_speed
        seek = abs(self.geo.arm_x(track) - arm.x1) / arm.speed_base
        arrival = (platter.angle + seek * rs) % 360.0
        rotate = forward_arc(arrival, self.geo.angle_of(req.block) - half) / rs
        return Estimate(seek=seek, rotate=rotate, transfer=(2.0 * half) / rs)

    def _satf(self, cands: Sequence[Request], arm: Arm, platter: Platter) -> Optional[Request]:
        best = None; best_est = None
        for r in cands:
            if r.state is State.DONE:
                continue
            est = self.estimate(r, arm, platter)
            # strict < keeps the first of equal estimates
            if best_est is None or est.total < best_est.total:
                best, best_est = r, est
        self.last_estimate = best_est
        return best

    def _sstf(self, cands: Sequence[Request], arm: Arm) -> List[Request]:
        min_dist = None; nearest: List[Request] = []
        for r in cands:
            if r.state is State.DONE:
                continue
            dist = abs(arm.track - self.geo.track_of(r.block))
            if min_dist is None or dist < min_dist:
                nearest = [r]; min_dist = dist
            elif dist == min_dist:
                nearest.append(r)
        return nearest

    def select_next(self, queue: List[Request], arm: Arm, platter: Platter, completed: int) -> Optional[Request]:
        if self.policy is Policy.FIFO:
            head = next((r for r in queue if r.state is not State.DONE), None)
            if head is None:
                self.last_estimate = None
                return None
            self.last_estimate = self.estimate(head, arm, platter)
            pick = head
        elif self.policy in (Policy.SATF, Policy.BSATF):
            end = self.window.visible(len(queue), completed)
            pick = self._satf(queue[:end], arm, platter)
        elif self.policy is Policy.SSTF:
            end = self.window.visible(len(queue), completed)
            pick = self._satf(self._sstf(queue[:end], arm), arm, platter)
        else:
            raise AssertionError(f"unhandled policy {self.policy}")
        if pick is not None:
            logger.debug("[%s] pick block=%d index=%d est=%s", self.policy.name, pick.block, pick.index,
                         f"{self.last_estimate.total:.2f}" if self.last_estimate else "-")
        return pick
