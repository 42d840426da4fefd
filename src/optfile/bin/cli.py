#!/usr/bin/env python3
"""Command-line entry point which loads a directive file into an option store."""

import argparse
import os
import sys
from typing import List, Optional

import yaml

from optfile.config.api import SCHEMA_ENV
from optfile.config.enums import LoadStatus, SetOptionFlags
from optfile.store import OptionStore, load_option_schema
from optfile.utils.logger import logger


def main(
    config: str,
    schema: Optional[str],
    profile: Optional[str],
    apply_profiles: Optional[List[str]],
    config_overrides: Optional[List[str]],
    dump: bool,
    verbosity: str,
) -> int:
    """Loads a directive file, applies profiles and optionally dumps the result.

    Performs these basic functions:
    - Build an option store from the option schema
    - Apply the command-line overrides, which config files cannot overwrite
    - Load the directive file and apply the requested profiles
    - Dump the resulting options and profiles as YAML

    Parameters
    ----------
    config : str
        Path to the directive file
    schema : str, optional
        Path to the YAML option schema. Falls back to $OPTFILE_SCHEMA, then
        to a store which accepts any option.
    profile : str, optional
        Profile receiving the options which precede the first header
    apply_profiles : List[str], optional
        Profiles to apply to the global options after loading
    config_overrides : List[str], optional
        List of overrides in the form "key=value"
    dump : bool
        Whether to print the resulting store as YAML
    verbosity : str
        Logging level name

    Returns
    -------
    int
        0 on success, 1 if any error was reported, 2 if the directive file
        could not be opened
    """
    logger.setLevel(verbosity.upper())

    # Load the option schema, if one is available
    schema = schema or os.environ.get(SCHEMA_ENV) or None
    store = OptionStore(load_option_schema(schema) if schema else None)

    # Apply the command-line overrides first, so that they take precedence
    for override in config_overrides or []:
        if "=" not in override:
            raise ValueError(
                f"Invalid --set format: '{override}'. Expected format: 'key=value'"
            )

        key, value = override.split("=", 1)
        if not store.set_option(key.strip(), value.strip(), SetOptionFlags.FROM_CMDLINE):
            raise ValueError(f"Invalid --set option: '{override}'")

    # Load the directive file
    result = store.load_file(config, initial_profile=profile)
    if result.status == LoadStatus.NOT_FOUND:
        logger.error("Configuration file not found: %s", config)
        return 2

    success = result.ok
    for name in apply_profiles or []:
        if not store.apply_profile(name, SetOptionFlags.PRESERVE_CMDLINE):
            success = False

    if dump:
        print(yaml.safe_dump(store.to_dict(), sort_keys=False), end="")

    return 0 if success else 1


def cli(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="optfile - line-oriented option file loader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  optfile -c player.conf --dump                        Load and print options
  optfile -c player.conf --schema options.yaml         Check against a schema
  optfile -c player.conf --set volume=50 --dump        Override an option
  optfile -c player.conf --apply-profile night --dump  Apply a profile
""",
    )

    parser.add_argument(
        "--version", "-v", action="version", version=f"optfile {get_version()}"
    )

    parser.add_argument(
        "-c", "--config", required=True, help="Path to the directive file"
    )

    parser.add_argument(
        "--schema", help=f"Path to the YAML option schema (default: ${SCHEMA_ENV})"
    )

    parser.add_argument(
        "--profile",
        help="Profile receiving the options which precede the first header",
    )

    parser.add_argument(
        "--apply-profile",
        action="append",
        dest="apply_profiles",
        metavar="NAME",
        help="Apply a profile to the global options after loading. "
        "Can be used multiple times.",
    )

    parser.add_argument(
        "--set",
        action="append",
        dest="config_overrides",
        metavar="KEY=VALUE",
        help="Set an option from the command line (e.g., --set volume=50). "
        "Config files cannot override it. Can be used multiple times.",
    )

    parser.add_argument(
        "--dump", action="store_true", help="Print the resulting options as YAML"
    )

    parser.add_argument(
        "--verbosity",
        default="info",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Logging level (default: info)",
    )

    args = parser.parse_args(argv)

    sys.exit(
        main(
            config=args.config,
            schema=args.schema,
            profile=args.profile,
            apply_profiles=args.apply_profiles,
            config_overrides=args.config_overrides,
            dump=args.dump,
            verbosity=args.verbosity,
        )
    )


def get_version():
    """Get optfile version."""
    from optfile.version import __version__

    return __version__


if __name__ == "__main__":
    cli()
