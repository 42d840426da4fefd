"""Limits and reserved names for optfile configuration loading.

This module defines the bounds enforced by the directive-file loader and the
names it treats specially.
"""

# Maximal include depth
MAX_RECURSION_DEPTH = 8

# Line, option name and parameter bounds (in bytes)
MAX_LINE_LEN = 10000
MAX_OPT_LEN = 1000
MAX_PARAM_LEN = 1500

# Number of line-level diagnostics after which a file is abandoned
MAX_ERRORS = 16

# Maximal nesting of profile applications (reference store)
MAX_PROFILE_DEPTH = 20

# Pseudo-directive which sets the description of the current profile
PROFILE_DESC = "profile-desc"

# Built-in options of the reference store
INCLUDE_OPTION = "include"
PROFILE_OPTION = "profile"

# Value stored for flag options given without a parameter
FLAG_VALUE = "yes"

# Byte classes used by the lexer
UTF8_BOM = b"\xef\xbb\xbf"
WHITESPACE = frozenset(b" \t\n\v\f\r")
COMMENT = ord("#")
ASSIGN = ord("=")
QUOTES = frozenset(b"\"'")
LENGTH_MARKER = ord("%")

# Environment variable naming a default option schema for the CLI
SCHEMA_ENV = "OPTFILE_SCHEMA"
