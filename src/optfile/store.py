"""In-memory option store implementing the loader's configuration context.

The store owns the global option values, the profiles and the include
recursion counter. Which options exist, and whether they need a parameter,
comes from an option schema written in YAML:

.. code-block:: yaml

    options:
      volume:
        requires_value: true
        default: "100"
        help: Playback volume
      fullscreen:
        requires_value: false

Two options are always available:

- `include=PATH` loads another directive file into the same store. Relative
  paths are resolved against the directory of the including file.
- `profile=NAME[,NAME...]` applies the options of one or more profiles to
  the global options.

Values set from the command line (`SetOptionFlags.FROM_CMDLINE`) are kept
when a configuration file later sets the same option.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Union

import yaml

from .config.api import (
    FLAG_VALUE,
    INCLUDE_OPTION,
    MAX_PROFILE_DEPTH,
    PROFILE_OPTION,
)
from .config.enums import LoadStatus, SetOptionFlags
from .config.errors import ConfigError, ConfigIncludeError, ConfigValidationError
from .config.loader import LoadResult, load_config_file
from .config.profiles import Profile, ProfileRegistry
from .utils.logger import logger

__all__ = ["OptionSpec", "OptionSchema", "OptionStore", "load_option_schema"]


@dataclass(frozen=True)
class OptionSpec:
    """Declaration of one option.

    Attributes
    ----------
    name : str
        Option name
    requires_value : bool, default True
        Whether the option must be given a parameter
    default : str, optional
        Value reported by the store until the option is set
    help : str
        Short description
    """

    name: str
    requires_value: bool = True
    default: Optional[str] = None
    help: str = ""


_BUILTINS = {
    INCLUDE_OPTION: OptionSpec(INCLUDE_OPTION, help="Load another config file"),
    PROFILE_OPTION: OptionSpec(PROFILE_OPTION, help="Apply profile(s)"),
}


class OptionSchema:
    """Set of declared options.

    Attributes
    ----------
    accept_unknown : bool
        If `True`, undeclared names are accepted as options which do not
        require a parameter
    """

    def __init__(
        self, specs: Optional[List[OptionSpec]] = None, accept_unknown: bool = False
    ):
        self._specs: Dict[str, OptionSpec] = {}
        self.accept_unknown = accept_unknown
        for spec in specs or []:
            self.add(spec)

    def add(self, spec: OptionSpec):
        if spec.name in _BUILTINS:
            raise ConfigValidationError(
                f"Option '{spec.name}' is built in and cannot be redeclared"
            )
        self._specs[spec.name] = spec

    def get(self, name: str) -> Optional[OptionSpec]:
        """Returns the declaration of an option, `None` if it does not exist."""
        spec = _BUILTINS.get(name) or self._specs.get(name)
        if spec is None and self.accept_unknown:
            spec = OptionSpec(name, requires_value=False)

        return spec

    def names(self) -> List[str]:
        return list(self._specs)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __iter__(self) -> Iterator[OptionSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptionSchema":
        """Builds a schema from its dictionary form.

        Parameters
        ----------
        data : Dict[str, Any]
            Dictionary with an `options` mapping of option names to their
            (possibly empty) declaration, and an optional `accept_unknown`
            boolean

        Returns
        -------
        OptionSchema
            Parsed schema

        Raises
        ------
        ConfigValidationError
            If the dictionary does not describe a valid schema
        """
        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Option schema must be a mapping, got {type(data).__name__}"
            )

        options = data.get("options") or {}
        if not isinstance(options, dict):
            raise ConfigValidationError("Option schema `options` must be a mapping")

        schema = cls(accept_unknown=bool(data.get("accept_unknown", False)))
        for name, decl in options.items():
            decl = decl or {}
            if not isinstance(decl, dict):
                raise ConfigValidationError(
                    f"Declaration of option '{name}' must be a mapping"
                )

            unknown = set(decl) - {"requires_value", "default", "help"}
            if unknown:
                raise ConfigValidationError(
                    f"Unknown keys in declaration of option '{name}': "
                    f"{sorted(unknown)}"
                )

            default = decl.get("default")
            schema.add(
                OptionSpec(
                    name=str(name),
                    requires_value=bool(decl.get("requires_value", True)),
                    default=str(default) if default is not None else None,
                    help=str(decl.get("help", "")),
                )
            )

        return schema

    @classmethod
    def from_yaml(cls, path: Union[str, "os.PathLike[str]"]) -> "OptionSchema":
        """Loads a schema from a YAML file.

        Parameters
        ----------
        path : Union[str, os.PathLike]
            Path to the YAML schema

        Returns
        -------
        OptionSchema
            Parsed schema

        Raises
        ------
        ConfigValidationError
            If the file cannot be read or does not describe a valid schema
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as exc:
            raise ConfigValidationError(
                f"Option schema could not be read: {path}"
            ) from exc
        except yaml.YAMLError as exc:
            raise ConfigValidationError(
                f"Option schema is not valid YAML: {path}: {exc}"
            ) from exc

        return cls.from_dict(data if data is not None else {})


def load_option_schema(path: Union[str, "os.PathLike[str]"]) -> OptionSchema:
    """Loads an option schema from a YAML file (see `OptionSchema.from_yaml`)."""
    return OptionSchema.from_yaml(path)


class OptionStore:
    """Global options and profiles of one configuration context.

    Attributes
    ----------
    schema : OptionSchema
        Declared options
    profiles : ProfileRegistry
        Profiles created by the loaded files
    recursion_depth : int
        Number of directive files currently being loaded into the store
    """

    def __init__(self, schema: Optional[OptionSchema] = None):
        """Initialize the store.

        Parameters
        ----------
        schema : OptionSchema, optional
            Declared options. If not provided, every option name is
            accepted and none requires a parameter.
        """
        self.schema = schema if schema is not None else OptionSchema(accept_unknown=True)
        self.profiles = ProfileRegistry()
        self.recursion_depth = 0
        self._values: Dict[str, str] = {}
        self._origins: Dict[str, SetOptionFlags] = {}
        self._profile_depth = 0
        self._file_dirs: List[str] = []

    def requires_value(self, name: str) -> bool:
        spec = self.schema.get(name)
        return spec is not None and spec.requires_value

    def set_option(
        self,
        name: str,
        value: Optional[str],
        flags: SetOptionFlags = SetOptionFlags.NONE,
    ) -> bool:
        """Sets a global option.

        Parameters
        ----------
        name : str
            Option name
        value : str, optional
            Option value. Flag options given no value are set to `"yes"`.
        flags : SetOptionFlags, optional
            Origin of the value

        Returns
        -------
        bool
            `False` if the option does not exist or needs a missing value

        Raises
        ------
        ConfigIncludeError
            If an included file cannot be opened
        """
        spec = self.schema.get(name)
        if spec is None:
            logger.debug("Option %s not found", name)
            return False

        if value is None:
            if spec.requires_value:
                return False
            value = FLAG_VALUE

        if name == INCLUDE_OPTION:
            return self._include(value, flags)
        if name == PROFILE_OPTION:
            return self.apply_profile(value, flags)

        # Command-line values take precedence over config files
        preserve = SetOptionFlags.FROM_CONFIG_FILE | SetOptionFlags.PRESERVE_CMDLINE
        if flags & preserve and self._origins.get(name, 0) & SetOptionFlags.FROM_CMDLINE:
            logger.debug(
                "Option %s was set on the command line, ignoring '%s'", name, value
            )
            return True

        self._values[name] = value
        self._origins[name] = flags
        return True

    def set_profile_option(
        self, profile: Profile, name: str, value: Optional[str]
    ) -> bool:
        """Appends an option to a profile, to be applied with the profile."""
        spec = self.schema.get(name)
        if spec is None:
            logger.debug("Option %s not found", name)
            return False

        if value is None and spec.requires_value:
            return False

        # Deferred includes keep the directory of the file declaring them
        if name == INCLUDE_OPTION:
            value = self._resolve_include(value)

        profile.add_option(name, value)
        return True

    def add_or_get_profile(self, name: str) -> Profile:
        return self.profiles.select_or_create(name)

    def apply_profile(
        self, names: str, flags: SetOptionFlags = SetOptionFlags.NONE
    ) -> bool:
        """Applies the options of one or more profiles to the global options.

        Parameters
        ----------
        names : str
            Comma-separated list of profile names
        flags : SetOptionFlags, optional
            Origin of the values

        Returns
        -------
        bool
            `False` if a profile does not exist, nests too deeply, or if one
            of its options is rejected
        """
        success = True
        for name in (n.strip() for n in names.split(",")):
            if name and not self._apply_one_profile(name, flags):
                success = False

        return success

    def _apply_one_profile(self, name: str, flags: SetOptionFlags) -> bool:
        profile = self.profiles.get(name)
        if profile is None:
            logger.error("Unknown profile '%s'.", name)
            return False

        if self._profile_depth >= MAX_PROFILE_DEPTH:
            logger.error("Profile inclusion too deep.")
            return False

        success = True
        self._profile_depth += 1
        try:
            for option, value in profile.options:
                try:
                    applied = self.set_option(option, value, flags)
                except ConfigError as exc:
                    logger.error("Profile %s: %s", name, exc)
                    applied = False

                if not applied:
                    logger.error(
                        "Profile %s: setting option %s='%s' failed.",
                        name,
                        option,
                        value if value is not None else "",
                    )
                    success = False
        finally:
            self._profile_depth -= 1

        return success

    def load_file(
        self,
        path: Union[str, "os.PathLike[str]"],
        initial_profile: Optional[str] = None,
        flags: SetOptionFlags = SetOptionFlags.NONE,
    ) -> LoadResult:
        """Loads a directive file into the store.

        Unlike calling `load_config_file` directly, this keeps track of the
        file's directory so that its relative `include` paths resolve.

        Parameters
        ----------
        path : Union[str, os.PathLike]
            Path to the directive file
        initial_profile : str, optional
            Profile receiving the options which precede the first header
        flags : SetOptionFlags, optional
            Extra origin flags

        Returns
        -------
        LoadResult
            Status of the load and the diagnostics raised
        """
        self._file_dirs.append(os.path.dirname(os.path.abspath(path)))
        try:
            return load_config_file(self, path, initial_profile, flags)
        finally:
            self._file_dirs.pop()

    def _resolve_include(self, value: str) -> str:
        path = os.path.expanduser(value)
        if not os.path.isabs(path) and self._file_dirs:
            path = os.path.join(self._file_dirs[-1], path)

        return path

    def _include(self, value: str, flags: SetOptionFlags) -> bool:
        path = self._resolve_include(value)
        result = self.load_file(path, flags=flags)
        if result.status == LoadStatus.NOT_FOUND:
            raise ConfigIncludeError(f"Can't open included file '{path}'")

        return result.ok

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Returns the value of an option, its declared default if unset."""
        if name in self._values:
            return self._values[name]

        spec = self.schema.get(name)
        if spec is not None and spec.default is not None:
            return spec.default

        return default

    def origin(self, name: str) -> SetOptionFlags:
        return self._origins.get(name, SetOptionFlags.NONE)

    @property
    def options(self) -> Dict[str, str]:
        """Declared defaults overlaid with the values set so far."""
        values = {s.name: s.default for s in self.schema if s.default is not None}
        values.update(self._values)
        return values

    def to_dict(self) -> Dict[str, Any]:
        """Dumps the options and profiles to plain Python structures."""
        profiles = {}
        for profile in self.profiles:
            profiles[profile.name] = {
                "description": profile.description,
                "options": [{name: value} for name, value in profile.options],
            }

        return {"options": self.options, "profiles": profiles}
