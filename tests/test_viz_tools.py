import pandas as pd

from disksim import DiskSim
from models import RequestStats, Totals
from viz_tools import (COLUMNS, TimelineLogger, format_request_line, format_totals,
                       layout_to_dataframe, plot_gantt, validate_timeline)


def _run(make_cfg, **kw):
    tl = TimelineLogger()
    sim = DiskSim(make_cfg(**kw), logger=tl)
    sim.run()
    return sim, tl


def test_console_lines():
    s = RequestStats(block=0, index=0, seek=0, rotate=164, transfer=30, total=194,
                     seek_begin=0, rotate_begin=0, transfer_begin=164, done_at=194)
    assert format_request_line(s) == "Block:   0  Seek:  0  Rotate:164  Transfer: 30  Total: 194"
    assert format_totals(Totals(0, 164, 90, 254)) == "TOTALS      Seek:  0  Rotate:164  Transfer: 90  Total: 254"


def test_dataframe_and_csv(make_cfg, tmp_path):
    _, tl = _run(make_cfg, addr="0,1,2")
    df = tl.to_dataframe()
    assert list(df.columns) == COLUMNS + ["order"]
    assert df["total"].tolist() == [194, 30, 30]
    out = tl.to_csv(str(tmp_path / "out" / "timeline.csv"))
    back = pd.read_csv(out)
    assert back["block"].tolist() == [0, 1, 2]


def test_empty_dataframe_keeps_columns():
    assert list(TimelineLogger().to_dataframe().columns) == COLUMNS


def test_layout_dataframe(make_cfg):
    sim, _ = _run(make_cfg, addr="0")
    df = layout_to_dataframe(sim.geometry)
    assert len(df) == 36
    assert df.groupby("track").size().tolist() == [12, 12, 12]


def test_validate_real_run(make_cfg):
    _, tl = _run(make_cfg, addr="3,14,30,2,2", policy="SATF")
    report = validate_timeline(tl.to_dataframe())
    assert report["ok"], report["issues"]
    assert report["rows"] == 5


def test_validate_flags_problems(make_cfg):
    _, tl = _run(make_cfg, addr="0,5")
    df = tl.to_dataframe()
    df.loc[0, "total"] += 1
    df.loc[1, "seek_begin"] = 10
    report = validate_timeline(df)
    assert not report["ok"]
    assert report["counts"]["duration_sum"] >= 1
    assert report["counts"]["overlap"] == 1


def test_gantt_written(make_cfg, tmp_path):
    _, tl = _run(make_cfg, addr="12,0")
    path = plot_gantt(tl.to_dataframe(), path=str(tmp_path / "g.png"))
    assert path and (tmp_path / "g.png").stat().st_size > 0


def test_gantt_empty():
    assert plot_gantt(TimelineLogger().to_dataframe()) is None
