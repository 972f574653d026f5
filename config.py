# config.py
# Default configuration + YAML overrides + validation.
# CLI options (disksim.main) are folded into the same nested dict.
from __future__ import annotations
import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

from models import ConfigError, Policy

logger = logging.getLogger(__name__)

CFG: Dict[str, Any] = {
    "rng_seed": 0,
    "requests": {
        # "-1" means: generate from *_desc = "count,max,min" (max -1 -> highest block)
        "addr": "-1",
        "addr_desc": "5,-1,0",
        "late_addr": "-1",
        "late_addr_desc": "0,-1,0",
    },
    "disk": {
        "seek_speed": 1.0,
        "rotate_speed": 1.0,
        "skew": 0,
        "zoning": "30,30,30",
        # rotation/transfer completes within rotate_speed + angle_epsilon degrees
        "angle_epsilon": 0.0001,
    },
    "policy": {
        "name": "FIFO",       # FIFO | SSTF | SATF | BSATF
        "window": -1,         # -1: whole queue
    },
    "export": {
        "compute": False,
        "graphics": False,
        "timeline_csv": None,
        "gantt_path": "gantt.png",
    },
}


def merge_cfg(base: Dict[str, Any], override: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Recursive merge; override wins. `base` is modified in place and returned."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            merge_cfg(base[k], v)
        else:
            base[k] = v
    return base


def load_cfg(path: Optional[str] = None) -> Dict[str, Any]:
    cfg = copy.deepcopy(CFG)
    if path is None:
        return cfg
    if not os.path.exists(path):
        raise ConfigError(f"config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must hold a mapping, got {type(data).__name__}")
    unknown = set(data) - set(CFG)
    if unknown:
        logger.warning("[CFG] ignoring unknown top-level keys in %s: %s", path, sorted(unknown))
        data = {k: v for k, v in data.items() if k in CFG}
    return merge_cfg(cfg, data)


def _as_number(section: str, key: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{section}.{key} must be a number, got {value!r}") from None


def validate_cfg(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reject settings that can never simulate. Geometry-dependent checks
    (zoning, seek speed vs track width, address ranges) live with the
    geometry and request builders.
    """
    pol = cfg["policy"]
    Policy.parse(pol["name"])
    try:
        window = int(pol["window"])
    except (TypeError, ValueError):
        raise ConfigError(f"policy.window must be an integer, got {pol['window']!r}") from None
    if window == 0 or window < -1:
        raise ConfigError(
            f"Scheduling window ({window}) must be positive or -1 (which means a full window)")

    disk = cfg["disk"]
    for key in ("seek_speed", "rotate_speed"):
        if _as_number("disk", key, disk[key]) <= 0:
            raise ConfigError(f"disk.{key} must be positive, got {disk[key]!r}")
    if _as_number("disk", "angle_epsilon", disk["angle_epsilon"]) < 0:
        raise ConfigError(f"disk.angle_epsilon must not be negative, got {disk['angle_epsilon']!r}")
    try:
        int(disk["skew"])
    except (TypeError, ValueError):
        raise ConfigError(f"disk.skew must be an integer, got {disk['skew']!r}") from None
    return cfg


def seed_rng_from_cfg(cfg: Dict[str, Any]):
    import random
    seed = cfg.get("rng_seed", None)
    if seed is not None:
        random.seed(int(seed))
        logger.debug("[INIT] random.seed(%s)", seed)


__all__ = ["CFG", "ConfigError", "load_cfg", "merge_cfg", "validate_cfg", "seed_rng_from_cfg"]
