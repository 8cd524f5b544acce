"""Configuration constants.

Values here are not user-configurable. For configurable values, see models.py.
"""

DEFAULT_MAX_OUTPUT_MB = 50
"""Default stdout ceiling for one external command."""

MODERN_SCHEMA_MIN_MAJOR = 16
"""First Xcode major version whose xcresulttool speaks the modern schema."""

CONFIG_FILE_NAME = ".xcreport.yaml"
"""Config file looked up in the working directory when --config is not given."""

ENV_PREFIX = "XCREPORT__"
"""Prefix for environment variable overrides."""
