# pixelbench/core/config.py
# Default parameters and argument validation shared by all core algorithms

from __future__ import annotations

import copy
from typing import Any, Dict

# --------------------- Defaults (edit freely) ---------------------
DEFAULTS: Dict[str, Dict[str, Any]] = {
    "stretch": {
        "minOut": 0,
        "maxOut": 255,
    },
    "fixed": {
        "threshold": 128,
    },
    "niblack": {
        "windowSize": 3,
        "k": 0.8,
    },
    "sauvola": {
        "windowSize": 15,
        "k": 0.5,
        "r": 128.0,            # dynamic range of sigma
    },
    "phansalkar": {
        "windowSize": 15,
        "k": 0.25,
        "r": 0.5,
        "p": 2.0,
        "q": 10.0,
    },
    "adaptiveGradient": {
        "windowSize": 15,
        "gradientWeight": 0.3,
        "k": 0.2,
    },
    "bernsen": {
        "windowSize": 31,
        "contrastThreshold": 15,
    },
    "median": {
        "windowSize": 3,
    },
    "kuwahara": {
        "windowSize": 5,
    },
    "kuwaharaGeneralized": {
        "regionSize": 3,
    },
    "pixelize": {
        "blockSize": 10,
    },
    "predator": {
        "pixelSize": 10,
        "colorGrade": False,
    },
    "selection": {
        "toleranceMin": 0,
        "toleranceMax": 32,
        "maxPixels": 0,        # 0 = unlimited
        "connectivity": 4,     # 4 or 8
        "opacity": 0.5,
    },
    "morphology": {
        "size": 3,             # odd
        "shape": "square",     # "square" | "cross" | "circle"
    },
    "history": {
        "capacity": 20,
    },
}
# ------------------------------------------------------------------

# Threshold used when no histogram split is valid (constant image)
FALLBACK_THRESHOLD = 128


def params_for(family: str) -> Dict[str, Any]:
    """Return a copy of the default parameters for an algorithm family."""
    if family not in DEFAULTS:
        raise ValueError(f"Unknown parameter family: {family}")
    return copy.deepcopy(DEFAULTS[family])


# --------------------- Validation ---------------------------------

def require_positive(func: str, name: str, value: int) -> int:
    value = int(value)
    if value < 1:
        raise ValueError(f"{func}: {name} must be at least 1, got {value}")
    return value


def require_odd(func: str, name: str, value: int) -> int:
    """Window and kernel sizes must be odd and positive so they have a centre."""
    value = require_positive(func, name, value)
    if value % 2 == 0:
        raise ValueError(f"{func}: {name} must be odd, got {value}")
    return value


def require_range(func: str, name: str, value: float, lo: float, hi: float) -> float:
    if not (lo <= value <= hi):
        raise ValueError(f"{func}: {name} must be within [{lo}, {hi}], got {value}")
    return value
