"""optfile configuration loading system.

This package reads line-oriented directive files:
- Global option assignments and `[name]` profile sections
- Bare, quoted and length-prefixed (`%N%`) parameter syntaxes
- Per-line error recovery with file/line diagnostics
- Include recursion-depth bookkeeping on the configuration context

Main Entry Point
----------------
load_config_file : Load a directive file into a configuration context

See loader module docstring for the directive language.
"""

from .enums import LoadStatus, SetOptionFlags, Severity
from .errors import (
    ConfigError,
    ConfigIncludeError,
    ConfigOptionError,
    ConfigParseError,
    ConfigReadError,
    ConfigValidationError,
)
from .lexer import Directive, SectionHeader, lex_line
from .loader import Diagnostic, LoadResult, load_config, load_config_file
from .ports import ConfigContext
from .profiles import Profile, ProfileRegistry

__all__ = [
    "load_config_file",
    "load_config",
    "lex_line",
    "Directive",
    "SectionHeader",
    "Diagnostic",
    "LoadResult",
    "LoadStatus",
    "SetOptionFlags",
    "Severity",
    "ConfigContext",
    "Profile",
    "ProfileRegistry",
    "ConfigError",
    "ConfigParseError",
    "ConfigOptionError",
    "ConfigReadError",
    "ConfigIncludeError",
    "ConfigValidationError",
]
