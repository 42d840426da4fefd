"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import pytest

from optfile.store import OptionSchema, OptionStore


@pytest.fixture(name="schema")
def fixture_schema():
    """Option schema shared by the loader and store tests."""
    return OptionSchema.from_dict(
        {
            "options": {
                "volume": {"requires_value": True, "default": "100"},
                "title": {"requires_value": True},
                "x": {},
                "y": {},
                "fullscreen": {"requires_value": False},
                "mute": {"requires_value": False},
            }
        }
    )


@pytest.fixture(name="store")
def fixture_store(schema):
    """Empty option store using the shared schema."""
    return OptionStore(schema)


@pytest.fixture(name="write_config")
def fixture_write_config(tmp_path):
    """Writes a directive file under the temporary directory.

    Parameters
    ----------
    tmp_path : str
       Generic pytest fixture used to handle temporary test files
    """

    def _write(name, content):
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write
