"""Engine settings: bundled JSON defaults plus an optional household override file.

``engine.json`` beside this module holds the tolerances, cadence lengths,
badge wording and gap bands the engine ships with.  A household can tune
any of them by pointing ``ENVELOPE_PLANNER_CONFIG`` at a JSON file that
repeats only the keys it wants to change; nested sections are merged key
by key rather than replaced.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent
ENGINE_CONFIG_NAME = 'engine'
OVERRIDE_ENV_VAR = 'ENVELOPE_PLANNER_CONFIG'


def load_config(config_name: str, config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Read ``<config_name>.json`` from ``config_dir`` (the bundled directory by default).

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    config_path = Path(config_dir or CONFIG_DIR) / f"{config_name}.json"
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def merge_settings(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay ``override`` on ``base``; nested mappings merge, anything else replaces.

    Example:
        >>> merge_settings({'constants': {'tolerance': 0.01, 'surplus_floor': 10.0}},
        ...                {'constants': {'surplus_floor': 25}})
        {'constants': {'tolerance': 0.01, 'surplus_floor': 25}}
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_engine_config(override_path: Optional[str] = None) -> Dict[str, Any]:
    """Bundled engine settings with the household override file applied.

    Args:
        override_path: JSON file of overrides; defaults to the
            ``ENVELOPE_PLANNER_CONFIG`` environment variable

    Returns:
        Engine configuration with ``constants``, ``cadence_days``,
        ``urgency`` and ``gap`` sections

    Raises:
        FileNotFoundError: If an override file is named but missing
    """
    config = load_config(ENGINE_CONFIG_NAME)
    override_path = override_path or os.getenv(OVERRIDE_ENV_VAR)
    if not override_path:
        return config

    path = Path(override_path)
    logger.info("Applying engine overrides from %s", path)
    return merge_settings(config, load_config(path.stem, path.parent))


def get_config_value(config: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Walk ``keys`` into ``config``, returning ``default`` when any step is missing.

    Example:
        >>> get_config_value(get_engine_config(), 'constants', 'surplus_floor')
        10.0
    """
    value: Any = config
    for key in keys:
        if not isinstance(value, Mapping) or key not in value:
            return default
        value = value[key]
    return value
