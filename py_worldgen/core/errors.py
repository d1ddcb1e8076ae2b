"""Exceptions raised by the generation passes."""


class WorldGenError(Exception):
    """Base class for all world generation errors."""


class DegenerateInputError(WorldGenError, ValueError):
    """A field has no dynamic range (minimum equals maximum)."""


class UnknownConfigurationError(WorldGenError, ValueError):
    """An unrecognized strategy selector was passed to a generator."""


class MissingCapabilityError(WorldGenError, TypeError):
    """The world or its cells lack a field that a generator needs."""
