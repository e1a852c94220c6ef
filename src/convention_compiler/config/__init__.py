"""
Configuration management package for the Convention Compiler.

This package loads config.yaml, creating it with default settings on first run.
"""

from ..exceptions import ConfigurationError
from .parser import (
    ConfigParser,
    ConfigParseResult,
    DEFAULT_CONFIG_PATH,
    load_or_create_config,
)

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
    'DEFAULT_CONFIG_PATH',
    'load_or_create_config',
]
