"""optfile Command Line Interface.

Main Components
---------------

**Primary CLI**:
    cli.py : Loads a directive file into the reference option store, with
             command-line overrides, profile selection and a YAML dump of
             the result

Usage Examples
--------------
Main CLI usage::

    optfile -c player.conf --schema options.yaml --dump
    optfile -c player.conf --set volume=50 --apply-profile night --dump
    python -m optfile.bin.cli -c player.conf --verbosity debug

Notes
-----
- Exit code 0 on success, 1 if any diagnostic was raised, 2 if the
  configuration file could not be opened
"""
