"""
Data models for the Convention Compiler.

This module contains all the core data structures used throughout the system.
"""

from .config import CompilerConfig, FuzzySearchConfig
from .convention import (
    Aborted,
    CombinedDocument,
    ConventionFile,
    PublishResult,
    Selected,
    Selection,
)

__all__ = [
    'Aborted',
    'CombinedDocument',
    'CompilerConfig',
    'ConventionFile',
    'FuzzySearchConfig',
    'PublishResult',
    'Selected',
    'Selection',
]
