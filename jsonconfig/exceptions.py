"""Exceptions raised by jsonconfig."""


class JsonConfigError(Exception):
    """Base class for all jsonconfig errors."""


class ConfigNotBoundError(JsonConfigError, RuntimeError):
    """A config was saved before a path and options were bound to it.

    Raised by ``JsonConfig.save`` when neither an explicit value nor a bound
    value is available. ``try_save`` re-raises it instead of reporting a failure.
    """


class DialectError(JsonConfigError, ValueError):
    """A JSON value is not accepted by the active serializer options."""
