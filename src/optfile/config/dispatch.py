"""Application of lexed directives to a configuration context."""

from typing import Optional

from .api import PROFILE_DESC
from .enums import SetOptionFlags
from .errors import ConfigError, ConfigOptionError
from .lexer import Directive
from .ports import ConfigContext
from .profiles import Profile

__all__ = ["normalize_name", "Dispatcher"]


def normalize_name(name: str) -> str:
    """Strips the leading `--` of a command-line style option name.

    Names shorter than 3 characters are left untouched, so that `--` alone
    stays a (bogus) option name rather than becoming an empty one.
    """
    if len(name) >= 3 and name.startswith("--"):
        return name[2:]

    return name


class Dispatcher:
    """Routes directives to the current profile or to the global options.

    Attributes
    ----------
    context : ConfigContext
        Configuration context which receives the options
    flags : SetOptionFlags
        Origin flags handed to the global setter. Always includes
        `FROM_CONFIG_FILE`.
    """

    def __init__(
        self, context: ConfigContext, flags: SetOptionFlags = SetOptionFlags.NONE
    ):
        self.context = context
        self.flags = flags | SetOptionFlags.FROM_CONFIG_FILE

    def dispatch(self, directive: Directive, profile: Optional[Profile] = None):
        """Applies one directive.

        Parameters
        ----------
        directive : Directive
            Lexed directive
        profile : Profile, optional
            Current profile. If `None`, the directive targets global options.

        Raises
        ------
        ConfigOptionError
            If the directive lacks a required parameter or if the setter
            rejects it. The directive is not applied in either case.
        """
        name = normalize_name(directive.name)
        value = directive.value

        # The profile description is not an option
        if profile is not None and name == PROFILE_DESC:
            profile.set_description(value if value is not None else "")
            return

        if self.context.requires_value(name) and not directive.value_set:
            raise ConfigOptionError(
                name,
                f"error parsing option {name}: missing parameter",
            )

        shown = value if value is not None else ""
        try:
            if profile is not None:
                success = self.context.set_profile_option(profile, name, value)
            else:
                success = self.context.set_option(name, value, self.flags)
        except ConfigError as exc:
            raise ConfigOptionError(
                name, f"setting option {name}='{shown}' failed: {exc}"
            ) from exc

        if not success:
            raise ConfigOptionError(name, f"setting option {name}='{shown}' failed.")
