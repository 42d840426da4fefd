"""Tests for directive dispatching, using a recording context."""

import pytest

from optfile.config.dispatch import Dispatcher, normalize_name
from optfile.config.enums import SetOptionFlags
from optfile.config.errors import ConfigOptionError, ConfigValidationError
from optfile.config.lexer import Directive
from optfile.config.ports import ConfigContext
from optfile.config.profiles import Profile, ProfileRegistry


class _Context(ConfigContext):
    def __init__(self, needs_value=(), accept=True, raises=None):
        self.recursion_depth = 0
        self.needs_value = set(needs_value)
        self.accept = accept
        self.raises = raises
        self.calls = []
        self.registry = ProfileRegistry()

    def requires_value(self, name):
        return name in self.needs_value

    def set_option(self, name, value, flags):
        if self.raises is not None:
            raise self.raises
        self.calls.append(("global", name, value, flags))
        return self.accept

    def set_profile_option(self, profile, name, value):
        self.calls.append((profile.name, name, value))
        return self.accept

    def add_or_get_profile(self, name):
        return self.registry.select_or_create(name)


@pytest.mark.parametrize(
    "name, expected",
    [("--volume", "volume"), ("--x", "x"), ("--", "--"), ("-v", "-v"), ("a--", "a--")],
)
def test_normalize_name(name, expected):
    """Only a leading `--` on names of 3+ characters is stripped."""
    assert normalize_name(name) == expected


class TestDispatcher:
    """Test suite for Dispatcher."""

    def test_global_option_flags(self):
        """Global options are marked as coming from a config file."""
        context = _Context()
        Dispatcher(context, SetOptionFlags.FROM_CMDLINE).dispatch(
            Directive("--volume", "5", True)
        )
        assert context.calls == [
            (
                "global",
                "volume",
                "5",
                SetOptionFlags.FROM_CMDLINE | SetOptionFlags.FROM_CONFIG_FILE,
            )
        ]

    def test_profile_option(self):
        """With a current profile, options go to the profile setter."""
        context = _Context()
        Dispatcher(context).dispatch(Directive("x", "1", True), Profile("a"))
        assert context.calls == [("a", "x", "1")]

    def test_profile_description(self):
        """`profile-desc` sets the description instead of an option."""
        context = _Context(needs_value={"profile-desc"})
        profile = Profile("a")
        Dispatcher(context).dispatch(Directive("--profile-desc", "Night"), profile)
        assert profile.description == "Night"
        assert context.calls == []

    def test_profile_description_without_value(self):
        """A description without a value is empty, not an error."""
        profile = Profile("a")
        Dispatcher(_Context()).dispatch(Directive("profile-desc"), profile)
        assert profile.description == ""

    def test_profile_description_without_profile(self):
        """Without a current profile, `profile-desc` is an ordinary option."""
        context = _Context()
        Dispatcher(context).dispatch(Directive("profile-desc", "x", True))
        assert context.calls[0][:3] == ("global", "profile-desc", "x")

    def test_missing_parameter(self):
        """Options requiring a value are not applied without one."""
        context = _Context(needs_value={"volume"})
        with pytest.raises(ConfigOptionError, match="missing parameter"):
            Dispatcher(context).dispatch(Directive("volume"))
        assert context.calls == []

    def test_empty_value_is_set(self):
        """An explicit empty value satisfies a required parameter."""
        context = _Context(needs_value={"title"})
        Dispatcher(context).dispatch(Directive("title", "", True))
        assert context.calls[0][2] == ""

    def test_rejected_value(self):
        """A setter returning False is reported with the option and value."""
        context = _Context(accept=False)
        with pytest.raises(ConfigOptionError, match="setting option x='1' failed"):
            Dispatcher(context).dispatch(Directive("x", "1", True))

    def test_setter_exception(self):
        """Configuration errors raised by a setter are reported the same way."""
        context = _Context(raises=ConfigValidationError("bad value"))
        with pytest.raises(ConfigOptionError, match="bad value") as excinfo:
            Dispatcher(context).dispatch(Directive("x", "1", True))
        assert excinfo.value.name == "x"
