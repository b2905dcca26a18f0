"""Load and save pydantic configs as JSON files."""

__version__ = "1.0.0"

from jsonconfig.config import JsonConfig
from jsonconfig.events import EVENT_NAMES, ConfigEvents, EventHook
from jsonconfig.exceptions import ConfigNotBoundError, DialectError, JsonConfigError
from jsonconfig.options import (
    PLAIN_DIALECT,
    JsonConfigOptions,
    SerializerOptions,
    get_global_options,
    reset_global_options,
    set_global_options,
)
from jsonconfig.outcome import Outcome, attempt

__all__ = [
    "EVENT_NAMES",
    "PLAIN_DIALECT",
    "ConfigEvents",
    "ConfigNotBoundError",
    "DialectError",
    "EventHook",
    "JsonConfig",
    "JsonConfigError",
    "JsonConfigOptions",
    "Outcome",
    "SerializerOptions",
    "attempt",
    "get_global_options",
    "reset_global_options",
    "set_global_options",
]
