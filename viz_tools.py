# viz_tools.py
# Statistics sink + validation + static charts for the disk simulator
# - TimelineLogger: one row per completed request (seek/rotate/transfer + phase ticks)
# - format_request_line / format_totals: console lines
# - validate_timeline: rule-checker (phase ordering, durations, overlaps)
# - plot_gantt: per-request seek/rotate/transfer bars
#
# Requirements: pandas, matplotlib

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import os
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from models import RequestStats, Totals

# -------------------- Colors --------------------
PHASE_COLORS = {
    "seek":     "#e67e22",  # orange
    "rotate":   "#add8e6",  # light blue
    "transfer": "#2ecc71",  # green
}

COLUMNS = ["block", "index", "seek", "rotate", "transfer", "total",
           "seek_begin", "rotate_begin", "transfer_begin", "done_at"]

# -------------------- Logger --------------------

@dataclass
class TimelineLogger:
    """
    Per-request completion log. DiskSim calls log_request() once per request
    reaching DONE (completion order) and log_totals() once at the end.
    """
    rows: List[Dict[str, Any]] = field(default_factory=list)
    totals: Optional[Totals] = None

    def log_request(self, stats: RequestStats):
        self.rows.append(asdict(stats))

    def log_totals(self, totals: Totals):
        self.totals = totals

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame(self.rows, columns=COLUMNS)
        if not df.empty:
            df["order"] = range(1, len(df) + 1)
        return df

    def to_csv(self, path: str = "timeline.csv") -> str:
        d = os.path.dirname(path)
        if d:
            os.makedirs(d, exist_ok=True)
        self.to_dataframe().to_csv(path, index=False)
        return path


def layout_to_dataframe(geometry) -> pd.DataFrame:
    return pd.DataFrame(geometry.layout_rows(), columns=["block", "track", "angle", "half_width"])

# -------------------- Console --------------------

def format_request_line(s: RequestStats) -> str:
    return (f"Block: {s.block:3d}  Seek:{s.seek:3d}  Rotate:{s.rotate:3d}"
            f"  Transfer:{s.transfer:3d}  Total:{s.total:4d}")


def format_totals(t: Totals) -> str:
    return (f"TOTALS      Seek:{t.seek:3d}  Rotate:{t.rotate:3d}"
            f"  Transfer:{t.transfer:3d}  Total:{t.total:4d}")

# -------------------- Validation --------------------

@dataclass
class ValidationIssue:
    kind: str        # 'phase_order' | 'duration_sum' | 'overlap'
    order: int       # 1-based completion order
    block: int
    detail: str


def validate_timeline(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Rules:
      1) seek_begin <= rotate_begin <= transfer_begin <= done_at
      2) seek + rotate + transfer == total
      3) one request at a time: each request starts no earlier than the previous one finished
    """
    issues: List[ValidationIssue] = []
    prev_done: Optional[int] = None
    for i, r in enumerate(df.itertuples(index=False), start=1):
        ticks: Tuple[int, ...] = (r.seek_begin, r.rotate_begin, r.transfer_begin, r.done_at)
        if any(a > b for a, b in zip(ticks, ticks[1:])):
            issues.append(ValidationIssue("phase_order", i, int(r.block), f"ticks={ticks}"))
        if r.seek + r.rotate + r.transfer != r.total:
            issues.append(ValidationIssue("duration_sum", i, int(r.block),
                                          f"{r.seek}+{r.rotate}+{r.transfer} != {r.total}"))
        if prev_done is not None and r.seek_begin < prev_done:
            issues.append(ValidationIssue("overlap", i, int(r.block),
                                          f"starts at {r.seek_begin}, previous done at {prev_done}"))
        prev_done = r.done_at
    counts: Dict[str, int] = {}
    for it in issues:
        counts[it.kind] = counts.get(it.kind, 0) + 1
    return {"ok": not issues, "issues": issues, "counts": counts, "rows": len(df)}

# -------------------- Gantt --------------------

def plot_gantt(df: pd.DataFrame,
               path: Optional[str] = None,
               linewidth: float = 6.0,
               figsize: Tuple[float, float] = (12, 4),
               title: Optional[str] = None):
    """
    y = completion order (block label), x = tick, color = phase.
    Saves to `path` when given, otherwise shows the figure.
    """
    if df.empty:
        print("[plot_gantt] empty dataframe"); return None

    plt.figure(figsize=figsize)
    for y, r in enumerate(df.itertuples(index=False)):
        plt.hlines(y, r.seek_begin, r.rotate_begin, colors=PHASE_COLORS["seek"], linewidth=linewidth)
        plt.hlines(y, r.rotate_begin, r.transfer_begin, colors=PHASE_COLORS["rotate"], linewidth=linewidth)
        plt.hlines(y, r.transfer_begin, r.done_at, colors=PHASE_COLORS["transfer"], linewidth=linewidth)

    plt.yticks(list(range(len(df))), [f"#{i} blk{b}" for i, b in zip(df["index"], df["block"])])
    plt.xlabel("time (ticks)")
    plt.ylabel("request")
    plt.title(title or "Disk request timeline (Gantt)")
    handles = [mpatches.Patch(color=c, label=k) for k, c in PHASE_COLORS.items()]
    plt.legend(handles=handles, loc="upper right", frameon=False)
    plt.grid(axis="x", linestyle="--", alpha=0.35)
    plt.tight_layout()
    if path:
        plt.savefig(path)
        plt.close()
        return path
    plt.show()
    return None
