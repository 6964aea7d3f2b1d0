"""Bundled engine defaults and their loaders.

Defaults live in JSON files beside this module so tolerances, cadence
lengths and display strings can be tuned without code changes.
"""

from .defaults import get_config_value, get_engine_config, load_config, merge_settings

__all__ = ['load_config', 'merge_settings', 'get_engine_config', 'get_config_value']
