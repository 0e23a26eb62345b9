"""Configuration: YAML + env overlay."""

from evdispatch.config.loader import DEFAULTS, load_config, load_config_with_env
from evdispatch.config.schema import Config

__all__ = ["DEFAULTS", "Config", "load_config", "load_config_with_env"]
