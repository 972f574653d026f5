# request_source.py (primary + late request streams)
import random
from typing import List, Optional, Sequence

from models import ConfigError

ADDR_DESC_HELP = (
    "The address description must be a comma-separated list of length three, without spaces. "
    "For example, \"10,100,0\" would indicate that 10 addresses should be generated, with "
    "100 as the maximum value, and 0 as the minimum. A max of -1 means just use the highest "
    "possible value as the max address to generate."
)


def _bad_desc(desc: str, why: str) -> ConfigError:
    return ConfigError(f"Bad address description ({desc}): {why}. {ADDR_DESC_HELP}")


def _check_range(name: int, max_block: int, what: str):
    if name < 0 or name > max_block:
        raise ConfigError(f"{what} {name} is outside the disk (valid blocks 0..{max_block})")


def make_requests(addr: str, addr_desc: str, max_block: int, rng=random) -> List[int]:
    """
    addr == "-1": draw `count` blocks uniformly from [min, max] per addr_desc "count,max,min".
    Otherwise addr is a literal comma-separated block list, kept in order.
    """
    addr = str(addr).strip()
    if addr == "-1":
        parts = str(addr_desc).split(",")
        if len(parts) != 3:
            raise _bad_desc(addr_desc, f"expected 3 fields, got {len(parts)}")
        try:
            count, hi, lo = (int(p) for p in parts)
        except ValueError:
            raise _bad_desc(addr_desc, "fields must be integers") from None
        if count < 0:
            raise _bad_desc(addr_desc, f"count ({count}) must not be negative")
        if hi == -1:
            hi = max_block
        if lo > hi:
            raise _bad_desc(addr_desc, f"min ({lo}) is larger than max ({hi})")
        _check_range(lo, max_block, "Minimum address")
        _check_range(hi, max_block, "Maximum address")
        return [rng.randint(lo, hi) for _ in range(count)]

    out = []
    for tok in addr.split(","):
        try:
            b = int(tok)
        except ValueError:
            raise ConfigError(f"Bad address list ({addr}): {tok!r} is not an integer block id") from None
        _check_range(b, max_block, "Address")
        out.append(b)
    return out


class LateRequestCursor:
    """Hands out late arrivals one at a time, in list order."""
    def __init__(self, blocks: Sequence[int]):
        self.blocks = list(blocks)
        self.pos = 0

    def take(self) -> Optional[int]:
        if self.pos >= len(self.blocks):
            return None
        b = self.blocks[self.pos]; self.pos += 1
        return b

    @property
    def remaining(self) -> int:
        return len(self.blocks) - self.pos

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0
