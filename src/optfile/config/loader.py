"""optfile directive-file loader.

This module reads a line-oriented directive file and applies each directive
to a configuration context (see `optfile.config.ports.ConfigContext`).

Directive Language
------------------

Comments and blank lines:
    # anything after a hash is ignored

Profiles:
    [profile-name]                  # following options go to this profile
    profile-desc = "Description"    # sets the current profile's description

Options:
    option-name                     # no parameter (flags)
    --option-name=value             # leading `--` is stripped
    option-name="a b # c"           # quoted, no escapes, `'` works as well
    option-name=%5%a b c            # length-prefixed, raw bytes

Error Handling
--------------
Line-level problems (bad names, oversized or malformed values, missing
parameters, rejected values, trailing garbage) are logged with the file name
and line number, and processing continues with the next line. Once 16 of
them have been recorded, the rest of the file is abandoned. A file which
cannot be opened is reported as `LoadStatus.NOT_FOUND`, which is not an
error: callers decide whether a missing configuration file matters.

Include Depth
-------------
Each load holds a `recursion_guard` on the context for its whole duration.
Collaborators which handle `include` by loading another file on the same
context therefore nest guards, and a load entered at a depth greater than
`MAX_RECURSION_DEPTH` fails before reading anything.

Public Functions
----------------
load_config_file : Load a directive file from a path (main entry point)
load_config : Load directives from an in-memory string or bytes
"""

import io
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterator, List, Optional, Union

from ..utils.logger import logger
from .api import MAX_ERRORS, MAX_RECURSION_DEPTH
from .dispatch import Dispatcher
from .enums import LoadStatus, SetOptionFlags, Severity
from .errors import ConfigOptionError, ConfigParseError, ConfigReadError
from .lexer import SectionHeader, lex_line
from .ports import ConfigContext
from .source import LineSource

__all__ = [
    "Diagnostic",
    "LoadResult",
    "recursion_guard",
    "load_config_file",
    "load_config",
]


@dataclass
class Diagnostic:
    """Problem reported while loading a directive file.

    Attributes
    ----------
    path : str
        Name of the file (or pseudo-file) being loaded
    line : int, optional
        1-based line number, `None` for problems which precede any line
    message : str
        Description of the problem
    severity : str
        One of `Severity.WARNING`, `Severity.ERROR` or `Severity.FATAL`
    """

    path: str
    line: Optional[int]
    message: str
    severity: str = Severity.ERROR

    def __str__(self):
        if self.line is None:
            return f"{self.path}: {self.message}"

        return f"{self.path}:{self.line}: {self.message}"


@dataclass
class LoadResult:
    """Outcome of a load, with every diagnostic raised along the way.

    Attributes
    ----------
    path : str
        Name of the file (or pseudo-file) which was loaded
    status : LoadStatus
        `SUCCESS`, `ERROR` if any diagnostic was raised, or `NOT_FOUND`
    diagnostics : List[Diagnostic]
        Diagnostics, in the order they were raised
    """

    path: str
    status: LoadStatus = LoadStatus.SUCCESS
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == LoadStatus.SUCCESS

    @property
    def messages(self) -> List[str]:
        return [d.message for d in self.diagnostics]

    def report(
        self, line: Optional[int], message: str, severity: str = Severity.ERROR
    ) -> Diagnostic:
        """Records and logs a diagnostic, marking the load as failed.

        Parameters
        ----------
        line : int, optional
            Line number the diagnostic refers to
        message : str
            Description of the problem
        severity : str, default Severity.ERROR
            Severity of the problem

        Returns
        -------
        Diagnostic
            Recorded diagnostic
        """
        diagnostic = Diagnostic(self.path, line, message, severity)
        self.diagnostics.append(diagnostic)
        self.status = LoadStatus.ERROR

        if severity == Severity.FATAL:
            logger.critical("%s", diagnostic)
        elif severity == Severity.WARNING:
            logger.warning("%s", diagnostic)
        else:
            logger.error("%s", diagnostic)

        return diagnostic


@contextmanager
def recursion_guard(context: ConfigContext) -> Iterator[int]:
    """Counts one more file being loaded on `context` while active.

    Parameters
    ----------
    context : ConfigContext
        Context owning the recursion counter

    Yields
    ------
    int
        Depth at entry, before this load was counted
    """
    depth = context.recursion_depth
    context.recursion_depth = depth + 1
    try:
        yield depth
    finally:
        context.recursion_depth -= 1


def load_config_file(
    context: ConfigContext,
    path: Union[str, "os.PathLike[str]"],
    initial_profile: Optional[str] = None,
    flags: SetOptionFlags = SetOptionFlags.NONE,
) -> LoadResult:
    """Load options and profiles from a directive file.

    Parameters
    ----------
    context : ConfigContext
        Context receiving the options and profiles
    path : Union[str, os.PathLike]
        Path to the directive file
    initial_profile : str, optional
        Profile receiving the options which precede the first header. If
        not provided, those options are set globally.
    flags : SetOptionFlags, optional
        Extra origin flags for the global setter. `FROM_CONFIG_FILE` is
        always added.

    Returns
    -------
    LoadResult
        Status of the load and the diagnostics raised

    Notes
    -----
    The load counts itself on `context.recursion_depth` through
    `recursion_guard` and restores the counter before returning, so its net
    effect on the counter is zero. Callers handling `include` must not
    increment the counter themselves before loading the nested file, and
    must not expect it to be decremented for them afterwards.

    Examples
    --------
    >>> result = load_config_file(store, "player.conf")
    >>> result.status
    <LoadStatus.SUCCESS: 1>
    """
    path = os.fspath(path)
    return _load(context, path, lambda: open(path, "rb"), initial_profile, flags)


def load_config(
    context: ConfigContext,
    config: Union[str, bytes],
    initial_profile: Optional[str] = None,
    flags: SetOptionFlags = SetOptionFlags.NONE,
    name: str = "<string>",
) -> LoadResult:
    """Load options and profiles from an in-memory directive text.

    Parameters
    ----------
    context : ConfigContext
        Context receiving the options and profiles
    config : Union[str, bytes]
        Directive text
    initial_profile : str, optional
        Profile receiving the options which precede the first header
    flags : SetOptionFlags, optional
        Extra origin flags for the global setter
    name : str, default "<string>"
        Name used in diagnostics

    Returns
    -------
    LoadResult
        Status of the load and the diagnostics raised

    See Also
    --------
    load_config_file : Load a directive file from a path
    """
    if isinstance(config, str):
        config = config.encode("utf-8", errors="surrogateescape")

    return _load(context, name, lambda: io.BytesIO(config), initial_profile, flags)


def _load(
    context: ConfigContext,
    name: str,
    opener: Callable[[], BinaryIO],
    initial_profile: Optional[str],
    flags: SetOptionFlags,
) -> LoadResult:
    """Shared driver of `load_config_file` and `load_config`."""
    result = LoadResult(path=name)
    logger.debug("Reading config file %s", name)

    with recursion_guard(context) as depth:
        if depth > MAX_RECURSION_DEPTH:
            result.report(
                None, "Maximum 'include' nesting depth exceeded.", Severity.FATAL
            )
        else:
            try:
                stream = opener()
            except OSError as exc:
                logger.debug("Can't open config file: %s", exc.strerror or exc)
                result.status = LoadStatus.NOT_FOUND
                return result

            with stream:
                _read_directives(context, stream, result, initial_profile, flags)

    if result.status == LoadStatus.ERROR:
        logger.critical("Error loading config file %s.", name)

    return result


def _read_directives(
    context: ConfigContext,
    stream: BinaryIO,
    result: LoadResult,
    initial_profile: Optional[str],
    flags: SetOptionFlags,
):
    """Lexes and dispatches every line of an opened stream."""
    profile = None
    if initial_profile is not None:
        profile = context.add_or_get_profile(initial_profile)

    dispatcher = Dispatcher(context, flags)
    errors = 0
    try:
        for line in LineSource(stream):
            if errors >= MAX_ERRORS:
                result.report(line.number, "too many errors", Severity.FATAL)
                return

            if line.overflow:
                result.report(line.number, "line too long")
                errors += 1
                continue

            try:
                token = lex_line(line.data)
            except ConfigParseError as exc:
                result.report(line.number, str(exc))
                errors += 1
                continue

            if token is None:
                continue

            if isinstance(token, SectionHeader):
                profile = context.add_or_get_profile(token.name)
                continue

            # Trailing garbage is reported, but the directive still applies
            if token.extra is not None:
                result.report(
                    line.number, f"extra characters: {token.extra}", Severity.WARNING
                )
                errors += 1

            try:
                dispatcher.dispatch(token, profile)
            except ConfigOptionError as exc:
                result.report(line.number, str(exc))
                errors += 1

    except ConfigReadError as exc:
        result.report(None, str(exc), Severity.FATAL)
