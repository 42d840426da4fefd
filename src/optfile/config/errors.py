"""Typed exceptions for optfile configuration loading.

This module defines specific exception types for the different kinds of
configuration errors, so that the loader can tell line-level problems, which
it records and recovers from, apart from fatal ones.
"""


class ConfigError(Exception):
    """Base exception for all configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when a single line of a directive file cannot be lexed."""


class ConfigOptionError(ConfigError):
    """Raised when a directive cannot be applied to the configuration.

    This covers directives missing a required parameter as well as values
    rejected by the option setters.
    """

    def __init__(self, name: str, message: str):
        """Initialize with the offending option name.

        Parameters
        ----------
        name : str
            Normalized name of the option
        message : str
            Description of the failure
        """
        self.name = name
        super().__init__(message)


class ConfigReadError(ConfigError):
    """Raised when an opened configuration stream can no longer be read."""


class ConfigIncludeError(ConfigError):
    """Raised when an included file cannot be found or loaded."""


class ConfigValidationError(ConfigError):
    """Raised when an option schema is malformed."""
