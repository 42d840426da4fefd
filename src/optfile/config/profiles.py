"""Profiles: named groups of option assignments selected by `[name]` headers."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

__all__ = ["Profile", "ProfileRegistry"]


@dataclass
class Profile:
    """Named, ordered list of option assignments.

    Attributes
    ----------
    name : str
        Profile name
    description : str, optional
        Human-readable description, set by the `profile-desc` directive
    options : List[Tuple[str, Optional[str]]]
        Ordered (option name, value) pairs applied to the profile
    """

    name: str
    description: Optional[str] = None
    options: List[Tuple[str, Optional[str]]] = field(default_factory=list)

    def set_description(self, text: str):
        self.description = text

    def add_option(self, name: str, value: Optional[str]):
        self.options.append((name, value))


class ProfileRegistry:
    """Lookup-or-create registry of profiles, in creation order."""

    def __init__(self):
        self._profiles: Dict[str, Profile] = {}

    def select_or_create(self, name: str) -> Profile:
        """Returns the profile called `name`, creating it if needed.

        Parameters
        ----------
        name : str
            Profile name

        Returns
        -------
        Profile
            Existing or newly registered profile
        """
        profile = self._profiles.get(name)
        if profile is None:
            profile = Profile(name)
            self._profiles[name] = profile

        return profile

    def get(self, name: str) -> Optional[Profile]:
        return self._profiles.get(name)

    def names(self) -> List[str]:
        return list(self._profiles)

    def __contains__(self, name: str) -> bool:
        return name in self._profiles

    def __iter__(self) -> Iterator[Profile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)
