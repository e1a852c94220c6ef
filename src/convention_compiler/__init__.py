"""
Convention Compiler - Core Package

Combines reusable Markdown convention files into a single document and
publishes it into project directories as CONVENTIONS.md, AGENTS.md and
CLAUDE.md.
"""

__version__ = "0.1.0"
__author__ = "Convention Compiler Team"
