class FlexlogError(Exception):
    """Base class for fatal flexlog errors."""


class LineSourceError(FlexlogError):
    """The log file cannot be opened or read at start."""


class ConfigError(FlexlogError):
    """Invalid configuration value."""
