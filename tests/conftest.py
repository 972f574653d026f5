import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from config import load_cfg


@pytest.fixture
def make_cfg():
    """Default config with the usual knobs overridable by keyword."""
    def _make(addr="0,1,2", addr_desc="5,-1,0", late_addr="-1", late_addr_desc="0,-1,0",
              policy="FIFO", window=-1, zoning="30,30,30", skew=0,
              seek_speed=1, rotate_speed=1):
        cfg = load_cfg()
        cfg["requests"].update(addr=addr, addr_desc=addr_desc,
                               late_addr=late_addr, late_addr_desc=late_addr_desc)
        cfg["policy"].update(name=policy, window=window)
        cfg["disk"].update(zoning=zoning, skew=skew, seek_speed=seek_speed, rotate_speed=rotate_speed)
        return cfg
    return _make
