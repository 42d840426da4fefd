"""Top-level module of the optfile source code."""

# Import main loading entry points
from .config import LoadStatus, SetOptionFlags, load_config, load_config_file
from .store import OptionSchema, OptionSpec, OptionStore, load_option_schema
from .version import __version__
