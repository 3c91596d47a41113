"""Configuration and I/O helpers."""

from .helpers import DiagnosticsConfig, load_config, config_from_dict, config_to_dict, save_results
