"""Core building blocks: errors and type guards."""

from evdispatch.core.errors import DispatcherConfigurationError, DispatcherError, InvalidEventType

__all__ = ["DispatcherConfigurationError", "DispatcherError", "InvalidEventType"]
