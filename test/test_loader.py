"""Tests for the directive-file loader."""

import io

import pytest

from optfile.config import LoadStatus, Severity, load_config, load_config_file
from optfile.config.api import MAX_ERRORS, MAX_LINE_LEN, MAX_RECURSION_DEPTH
from optfile.config import loader as config_loader
from optfile.config.loader import recursion_guard
from optfile.store import OptionStore


class TestLoadConfigFile:
    """Loading directive files from disk."""

    def test_basic_load(self, store, write_config):
        """Global options, flags and comments."""
        path = write_config(
            "basic.conf",
            "# player settings\n"
            "volume=50\n"
            "\n"
            "--fullscreen   # no value needed\n"
            'title="My Movie # 2"\n',
        )

        result = load_config_file(store, path)

        assert result.status == LoadStatus.SUCCESS
        assert result.diagnostics == []
        assert store.get("volume") == "50"
        assert store.get("fullscreen") == "yes"
        assert store.get("title") == "My Movie # 2"

    def test_not_found(self, store, tmp_path):
        """A missing file is reported distinctly and is not an error."""
        result = load_config_file(store, tmp_path / "missing.conf")
        assert result.status == LoadStatus.NOT_FOUND
        assert result.diagnostics == []
        assert store.recursion_depth == 0

    def test_profiles_scenario(self, store, write_config):
        """Headers select profiles; the initial profile stays empty."""
        path = write_config("profiles.conf", "[a]\nx=1\n[b]\ny=2\n")

        result = load_config_file(store, path, initial_profile="default")

        assert result.ok
        assert store.profiles.names() == ["default", "a", "b"]
        assert store.profiles.get("default").options == []
        assert store.profiles.get("a").options == [("x", "1")]
        assert store.profiles.get("b").options == [("y", "2")]

    def test_profile_reselected(self, store, write_config):
        """A repeated header reselects the existing profile."""
        path = write_config(
            "again.conf",
            "[a]\nprofile-desc='First'\nx=1\n[b]\ny=2\n[a]\ny=3\n",
        )

        assert load_config_file(store, path).ok
        profile = store.profiles.get("a")
        assert len(store.profiles) == 2
        assert profile.description == "First"
        assert profile.options == [("x", "1"), ("y", "3")]

    def test_options_before_header_are_global(self, store, write_config):
        """Without an initial profile, leading options are global."""
        path = write_config("mixed.conf", "volume=70\n[night]\nvolume=10\n")

        assert load_config_file(store, path).ok
        assert store.get("volume") == "70"
        assert store.profiles.get("night").options == [("volume", "10")]

    def test_bracketed_name_is_header(self, store, write_config):
        """`[foo]` is a header even when followed by an assignment."""
        path = write_config("header.conf", "[foo]=bar\nx=1\n")

        assert load_config_file(store, path).ok
        assert store.profiles.get("foo").options == [("x", "1")]

    def test_line_errors_are_recovered(self, store, write_config):
        """Bad lines are reported with their line number and skipped."""
        path = write_config(
            "errors.conf",
            "volume=10\n"
            "=oops\n"
            "title\n"
            "unknown=1\n"
            "x=%5%abc\n"
            "y=2\n",
        )

        result = load_config_file(store, path)

        assert result.status == LoadStatus.ERROR
        assert [d.line for d in result.diagnostics] == [2, 3, 4, 5]
        assert "parse error" in result.diagnostics[0].message
        assert "missing parameter" in result.diagnostics[1].message
        assert "setting option unknown='1' failed" in result.diagnostics[2].message
        assert "bogus % length" in result.diagnostics[3].message
        assert str(result.diagnostics[0]) == f"{path}:2: parse error"
        assert store.get("volume") == "10"
        assert store.get("y") == "2"

    def test_extra_characters_still_applied(self, store, write_config):
        """Trailing garbage is a warning, and the option is still set."""
        path = write_config("extra.conf", "volume=30 loud\n")

        result = load_config_file(store, path)

        assert result.status == LoadStatus.ERROR
        assert result.diagnostics[0].severity == Severity.WARNING
        assert result.messages == ["extra characters: loud"]
        assert store.get("volume") == "30"

    def test_length_prefixed_value(self, store, write_config):
        """Length-prefixed literals keep their raw content."""
        path = write_config("raw.conf", b"title=%10%a #'b\" c\xc3\xa9\n")

        assert load_config_file(store, path).ok
        assert store.get("title") == "a #'b\" cé"

    def test_line_too_long(self, store, write_config):
        """Overlong lines are reported, not silently truncated."""
        path = write_config(
            "long.conf", "title=" + "x" * MAX_LINE_LEN + "\nvolume=1\n"
        )

        result = load_config_file(store, path)

        assert result.messages == ["line too long"]
        assert store.get("title") is None
        assert store.get("volume") == "1"

    def test_too_many_errors(self, store, write_config, caplog):
        """After 16 line-level errors the rest of the file is skipped."""
        lines = ["=bad"] * (MAX_ERRORS + 4) + ["volume=5"]
        path = write_config("many.conf", "\n".join(lines) + "\n")

        result = load_config_file(store, path)

        assert result.status == LoadStatus.ERROR
        assert len(result.diagnostics) == MAX_ERRORS + 1
        final = result.diagnostics[-1]
        assert final.severity == Severity.FATAL
        assert final.message == "too many errors"
        assert final.path == str(path)
        assert store.get("volume") == "100"
        assert store.recursion_depth == 0
        assert f"Error loading config file {path}." in caplog.text

    def test_sixteen_errors_then_eof(self, store, write_config):
        """The cap only triggers when another line is read."""
        path = write_config("cap.conf", "=bad\n" * MAX_ERRORS)

        result = load_config_file(store, path)

        assert len(result.diagnostics) == MAX_ERRORS
        assert all(d.severity == Severity.ERROR for d in result.diagnostics)


class TestLoadConfigString:
    """Loading directives from memory."""

    def test_string(self, store):
        """Strings are loaded like files, under a pseudo-file name."""
        result = load_config(store, "volume=5\nbogus line here\n", name="<test>")
        assert store.get("volume") == "5"
        assert result.path == "<test>"
        assert result.diagnostics[0].line == 2

    def test_bytes_with_bom(self, store):
        """A leading byte-order mark is ignored."""
        assert load_config(store, b"\xef\xbb\xbfmute\n").ok
        assert store.get("mute") == "yes"


class TestRecursionDepth:
    """Include depth bookkeeping."""

    def test_guard_restores_depth(self, store):
        """The guard counts the load and restores the counter on exit."""
        with recursion_guard(store) as depth:
            assert depth == 0
            assert store.recursion_depth == 1
        assert store.recursion_depth == 0

    def test_guard_restores_on_exception(self, store):
        """The counter is restored when the load raises."""
        with pytest.raises(RuntimeError):
            with recursion_guard(store):
                raise RuntimeError("boom")
        assert store.recursion_depth == 0

    def test_depth_exceeded(self, store, write_config):
        """Entering too deep is fatal and no line is read."""
        path = write_config("deep.conf", "volume=5\n")
        store.recursion_depth = MAX_RECURSION_DEPTH + 1

        result = load_config_file(store, path)

        assert result.status == LoadStatus.ERROR
        assert result.diagnostics[0].severity == Severity.FATAL
        assert "nesting depth exceeded" in result.diagnostics[0].message
        assert store.get("volume") == "100"
        assert store.recursion_depth == MAX_RECURSION_DEPTH + 1

    def test_depth_at_limit(self, store, write_config):
        """Entering exactly at the limit is still allowed."""
        path = write_config("limit.conf", "volume=5\n")
        store.recursion_depth = MAX_RECURSION_DEPTH

        assert load_config_file(store, path).ok
        assert store.recursion_depth == MAX_RECURSION_DEPTH

    def test_depth_restored_after_read_error(self, store):
        """A stream failing after open is fatal, and the depth is restored."""

        class _Broken(io.BytesIO):
            def readline(self, size=-1):
                raise OSError("I/O error")

        result = config_loader._load(store, "<broken>", lambda: _Broken(), None, 0)

        assert result.status == LoadStatus.ERROR
        assert result.diagnostics[0].severity == Severity.FATAL
        assert store.recursion_depth == 0


def test_independent_contexts(schema, write_config):
    """Loads on separate stores do not share any state."""
    path = write_config("shared.conf", "[a]\nvolume=1\n")
    first, second = OptionStore(schema), OptionStore(schema)

    load_config_file(first, path)
    assert "a" in first.profiles
    assert "a" not in second.profiles
