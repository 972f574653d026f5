# disksim.py
# Tick-driven disk simulator: Scheduler picks, Arm/Platter move, one request in flight.
# - dispatch: pick next request, plan the seek, admit at most one late request
# - step    : timer+1, rotate platter, then seek -> rotate -> transfer checks
# - sequential blocks on the same track continue transferring without seek/rotate

from __future__ import annotations
import argparse
import logging
import random
import sys
from typing import Any, Dict, List, Optional

from config import load_cfg, seed_rng_from_cfg, validate_cfg
from geometry import TRACK_WIDTH, DiskGeometry
from mechanics import Arm, Platter, new_lifecycle_machine
from models import ConfigError, Policy, Request, RunResult, State, Totals
from request_source import LateRequestCursor, make_requests
from scheduler import SchedWindow, Scheduler
from viz_tools import TimelineLogger, format_request_line, format_totals, plot_gantt

log = logging.getLogger(__name__)


class DiskSim:
    def __init__(self, cfg: Dict[str, Any], logger: Optional[TimelineLogger] = None, rng=random):
        self.cfg = validate_cfg(cfg)
        disk = cfg["disk"]; reqs = cfg["requests"]; pol = cfg["policy"]
        seek_speed = float(disk["seek_speed"])
        rotate_speed = float(disk["rotate_speed"])

        # everything that can fail does so here, before tick 0
        self.geometry = DiskGeometry.build(disk["zoning"], int(disk["skew"]), seek_speed)
        max_block = self.geometry.max_block
        self.requests: List[int] = make_requests(reqs["addr"], reqs["addr_desc"], max_block, rng)
        self.late_requests: List[int] = make_requests(reqs["late_addr"], reqs["late_addr_desc"], max_block, rng)
        self.late = LateRequestCursor(self.late_requests)

        self.policy = Policy.parse(pol["name"])
        window = int(pol["window"])
        fair = window if (self.policy is Policy.BSATF and window != -1) else -1
        self.scheduler = Scheduler(self.policy, self.geometry, SchedWindow(window, fair))

        self.logger = logger
        self.machine = new_lifecycle_machine()
        self.queue: List[Request] = []
        for b in self.requests:
            self._enqueue(b)

        self.arm = Arm(track=0, x1=self.geometry.arm_x(0), width=TRACK_WIDTH,
                       speed_base=seek_speed, speed=seek_speed)
        self.platter = Platter(rotate_speed=rotate_speed, epsilon=float(disk["angle_epsilon"]))

        self.timer = 0
        self.current: Optional[Request] = None
        self.completed = 0
        self.completions = []
        self.totals = Totals()
        self.started = False
        self.done = False

    # ---- queue ----
    def _enqueue(self, block: int) -> Request:
        req = Request(block=block, index=len(self.queue))
        self.machine.add_model(req)
        self.queue.append(req)
        return req

    # ---- dispatch ----
    def _plan_seek(self, req: Request):
        req.seek(tick=self.timer)
        track = self.geometry.track_of(req.block)
        if track == self.arm.track:
            req.rotate(tick=self.timer)
            return
        self.arm.plan(track, self.geometry.arm_x(track))

    def _dispatch(self):
        if self.completed == len(self.queue):
            self._finish()
            return
        pick = self.scheduler.select_next(self.queue, self.arm, self.platter, self.completed)
        if pick is None:
            raise AssertionError(
                f"scheduler found no candidate with {len(self.queue) - self.completed} request(s) pending")
        self.current = pick
        self._plan_seek(pick)
        late = self.late.take()
        if late is not None:
            self._enqueue(late)
            log.debug("[LATE] t=%d admitted block %d as index %d", self.timer, late, len(self.queue) - 1)

    def _finish(self):
        self.totals.total = self.timer
        self.current = None
        self.done = True
        if self.logger is not None:
            self.logger.log_totals(self.totals)

    # ---- phase checks ----
    def _done_with_rotation(self, req: Request) -> bool:
        half = self.geometry.half_width(self.arm.track)
        return self.platter.radially_close((self.geometry.angle_of(req.block) - half) % 360.0)

    def _done_with_transfer(self, req: Request) -> bool:
        half = self.geometry.half_width(self.arm.track)
        return self.platter.radially_close((self.geometry.angle_of(req.block) + half) % 360.0)

    def _is_sequential(self, prev: int, nxt: int) -> bool:
        track = self.geometry.track_of(prev)
        if self.geometry.track_of(nxt) != track:
            return False
        if nxt == prev + 1:
            return True
        info = self.geometry.tracks[track]
        if info.empty:
            return False
        return prev == info.last_block and nxt == info.first_block

    def _on_complete(self, req: Request):
        req.complete(tick=self.timer)
        self.completed += 1
        stats = req.to_stats()
        self.totals.add(stats)
        self.completions.append(stats)
        if self.logger is not None:
            self.logger.log_request(stats)
        self.scheduler.window.on_complete(len(self.queue))

        self._dispatch()
        if self.done:
            return
        nxt = self.current
        if self._is_sequential(req.block, nxt.block):
            # already on the track and at the start of the next block
            nxt.transfer(tick=self.timer)

    # ---- driver ----
    def start(self):
        if self.started:
            return
        self.started = True
        log.debug("[SIM] %s: %d request(s), %d late", self.policy.name, len(self.requests), len(self.late_requests))
        self._dispatch()

    def step(self):
        if not self.started:
            self.start()
        if self.done:
            return
        self.timer += 1
        self.platter.advance()

        req = self.current
        if req.state is State.SEEKING and self.arm.step():
            req.rotate(tick=self.timer)
        if req.state is State.ROTATING and self._done_with_rotation(req):
            req.transfer(tick=self.timer)
        if req.state is State.TRANSFERRING and self._done_with_transfer(req):
            self._on_complete(req)

    def run(self) -> RunResult:
        self.start()
        while not self.done:
            self.step()
        return RunResult(completions=list(self.completions), totals=self.totals,
                         requests=list(self.requests), late_requests=list(self.late_requests))

# --------------------------------------------------------------------------
# CLI

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Disk scheduling simulator (seek, rotation, transfer)")
    p.add_argument("-s", "--seed", dest="seed", type=int, help="random seed")
    p.add_argument("-a", "--addr", dest="addr", help="request list (comma-separated), -1 -> random")
    p.add_argument("-A", "--addrDesc", dest="addr_desc", help="count,max,min for random requests (max -1: highest block)")
    p.add_argument("-S", "--seekSpeed", dest="seek_speed", type=float, help="arm speed per tick")
    p.add_argument("-R", "--rotSpeed", dest="rotate_speed", type=float, help="degrees rotated per tick")
    p.add_argument("-p", "--policy", dest="policy", help="FIFO, SSTF, SATF or BSATF")
    p.add_argument("-w", "--schedWindow", dest="window", type=int, help="scheduling window, -1 for the whole queue")
    p.add_argument("-o", "--skewOffset", dest="skew", type=int, help="track skew in blocks")
    p.add_argument("-z", "--zoning", dest="zoning", help="degrees per block on each of the 3 tracks")
    p.add_argument("-G", "--graphics", dest="graphics", action="store_true", default=None, help="write a Gantt chart of the run")
    p.add_argument("-l", "--lateAddr", dest="late_addr", help="late-arriving requests, -1 -> random")
    p.add_argument("-L", "--lateAddrDesc", dest="late_addr_desc", help="count,max,min for random late requests")
    p.add_argument("-c", "--compute", dest="compute", action="store_true", default=None, help="print the answers")
    p.add_argument("--config", dest="config", help="YAML file merged over the defaults")
    p.add_argument("--csv", dest="csv", help="export per-request timeline to CSV")
    p.add_argument("--verbose", action="store_true", help="debug logging (layout, decisions)")
    return p


_ARG_TO_CFG = {
    "seed": ("rng_seed",),
    "addr": ("requests", "addr"),
    "addr_desc": ("requests", "addr_desc"),
    "late_addr": ("requests", "late_addr"),
    "late_addr_desc": ("requests", "late_addr_desc"),
    "seek_speed": ("disk", "seek_speed"),
    "rotate_speed": ("disk", "rotate_speed"),
    "skew": ("disk", "skew"),
    "zoning": ("disk", "zoning"),
    "policy": ("policy", "name"),
    "window": ("policy", "window"),
    "compute": ("export", "compute"),
    "graphics": ("export", "graphics"),
    "csv": ("export", "timeline_csv"),
}


def cfg_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    cfg = load_cfg(args.config)
    for attr, path in _ARG_TO_CFG.items():
        v = getattr(args, attr, None)
        if v is None:
            continue
        node = cfg
        for k in path[:-1]:
            node = node[k]
        node[path[-1]] = v
    return cfg


def _print_options(cfg: Dict[str, Any]):
    r = cfg["requests"]; d = cfg["disk"]; p = cfg["policy"]; e = cfg["export"]
    for k, v in [("seed", cfg["rng_seed"]), ("addr", r["addr"]), ("addrDesc", r["addr_desc"]),
                 ("seekSpeed", d["seek_speed"]), ("rotateSpeed", d["rotate_speed"]),
                 ("skew", d["skew"]), ("window", p["window"]), ("policy", p["name"]),
                 ("compute", e["compute"]), ("graphics", e["graphics"]), ("zoning", d["zoning"]),
                 ("lateAddr", r["late_addr"]), ("lateAddrDesc", r["late_addr_desc"])]:
        print(f"OPTIONS {k} {v}")
    print()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    timeline = TimelineLogger()
    try:
        cfg = cfg_from_args(args)
        seed_rng_from_cfg(cfg)
        _print_options(cfg)
        sim = DiskSim(cfg, logger=timeline)
    except ConfigError as e:
        print(f"[CONFIG] {e}", file=sys.stderr)
        return 1

    print("REQUESTS " + ",".join(str(b) for b in sim.requests))
    print()
    if sim.late_requests:
        print("LATE REQUESTS " + ",".join(str(b) for b in sim.late_requests))
        print()

    exp = cfg["export"]
    compute = bool(exp["compute"])
    if exp["graphics"] and not compute:
        print("[GRAPHICS] chart output implies answers; setting compute flag to True\n")
        compute = True
    if not compute:
        print("For the requests above, compute the seek, rotate, and transfer times.")
        print("Use -c to see the answers.")
        print()

    res = sim.run()
    if compute:
        for s in res.completions:
            print(format_request_line(s))
        print()
        print(format_totals(res.totals))
        print()

    if exp.get("timeline_csv"):
        print(f"[EXPORT] timeline -> {timeline.to_csv(exp['timeline_csv'])}")
    if exp["graphics"]:
        path = plot_gantt(timeline.to_dataframe(), path=exp.get("gantt_path") or "gantt.png")
        if path:
            print(f"[GRAPHICS] gantt -> {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
