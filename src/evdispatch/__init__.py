"""Validated, synchronous publish/subscribe event dispatcher."""

from loguru import logger

from evdispatch.api import EmbeddableApi, forward_events
from evdispatch.config import Config, load_config, load_config_with_env
from evdispatch.core.errors import DispatcherConfigurationError, DispatcherError, InvalidEventType
from evdispatch.dispatcher import Dispatcher, Subscription
from evdispatch.events import Event, event
from evdispatch.log import setup_logging
from evdispatch.rules import MATCH_ANY, Ruleset

__version__ = "0.1.0"

# Silent until the application calls setup_logging().
logger.disable("evdispatch")

__all__ = [
    "MATCH_ANY",
    "Config",
    "Dispatcher",
    "DispatcherConfigurationError",
    "DispatcherError",
    "EmbeddableApi",
    "Event",
    "InvalidEventType",
    "Ruleset",
    "Subscription",
    "__version__",
    "event",
    "forward_events",
    "load_config",
    "load_config_with_env",
    "setup_logging",
]
