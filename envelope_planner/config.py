"""Configuration management for the envelope planner.

This module centralizes engine settings: the bundled JSON defaults (plus
any household override file) are read once at import and selected values
can be overridden through environment variables.
"""

from __future__ import annotations

import os
from typing import Dict

from .settings import get_config_value, get_engine_config

_ENGINE_CONFIG = get_engine_config()

# Comparisons of dollar amounts treat anything within one cent as equal
EPSILON = float(
    os.getenv("ENVELOPE_PLANNER_EPSILON", get_config_value(_ENGINE_CONFIG, 'constants', 'tolerance', default=0.01))
)

# Unallocated income below this floor does not trigger the surplus warning
SURPLUS_FLOOR = float(
    os.getenv(
        "ENVELOPE_PLANNER_SURPLUS_FLOOR",
        get_config_value(_ENGINE_CONFIG, 'constants', 'surplus_floor', default=10.0),
    )
)

# Cadence used when an income source's pay frequency can't be resolved
DEFAULT_PAY_CYCLE = os.getenv(
    "ENVELOPE_PLANNER_PAY_CYCLE",
    get_config_value(_ENGINE_CONFIG, 'constants', 'default_pay_cycle', default='fortnightly'),
)

CADENCE_DAYS: Dict[str, float] = {
    key: float(value)
    for key, value in get_config_value(_ENGINE_CONFIG, 'cadence_days', default={}).items()
}
URGENCY_TEXT: Dict[str, Dict[str, str]] = get_config_value(_ENGINE_CONFIG, 'urgency')
GAP_THRESHOLDS: Dict[str, float] = get_config_value(_ENGINE_CONFIG, 'gap')
