"""Utility functions and tools used across the optfile package.

- `logger`: Logging configuration shared by the loader, the reference store
  and the command-line interface
"""
