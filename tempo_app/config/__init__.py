"""
Configuration module.

Layered configuration for the tracker: dataclass defaults, an optional
YAML file, environment variables and command-line overrides.
"""
