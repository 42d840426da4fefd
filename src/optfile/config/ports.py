"""Collaborator interface of the directive-file loader.

The loader does not store or validate anything itself: every directive is
handed to a configuration context which owns the option values, the
profiles and the include recursion counter.
"""

from typing import Optional, Protocol, runtime_checkable

from .enums import SetOptionFlags
from .profiles import Profile

__all__ = ["ConfigContext"]


@runtime_checkable
class ConfigContext(Protocol):
    """Option registry, option setters and profile registry in one object.

    Attributes
    ----------
    recursion_depth : int
        Number of directive files currently being loaded on this context
    """

    recursion_depth: int

    def requires_value(self, name: str) -> bool:
        """Whether the option cannot be given without a parameter."""

    def set_option(
        self, name: str, value: Optional[str], flags: SetOptionFlags
    ) -> bool:
        """Set a global option; returns `False` if the value is rejected."""

    def set_profile_option(
        self, profile: Profile, name: str, value: Optional[str]
    ) -> bool:
        """Append an option to a profile; returns `False` if rejected."""

    def add_or_get_profile(self, name: str) -> Profile:
        """Return the profile called `name`, creating it if needed."""
