"""Module which contains enumerated values shared by the loader and its
collaborators."""

from enum import IntEnum, IntFlag

__all__ = ["LoadStatus", "SetOptionFlags", "Severity"]


class LoadStatus(IntEnum):
    """Outcome of loading one directive file.

    The values match the historical integer return codes of the loader, so
    that `int(status)` can be handed to callers expecting them.
    """

    ERROR = -1
    NOT_FOUND = 0
    SUCCESS = 1


class SetOptionFlags(IntFlag):
    """Origin metadata handed to the global option setter."""

    NONE = 0
    FROM_CONFIG_FILE = 1
    FROM_CMDLINE = 2
    PRESERVE_CMDLINE = 4


class Severity:
    """Severity levels attached to loader diagnostics."""

    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"
