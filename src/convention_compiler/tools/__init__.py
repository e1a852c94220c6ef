"""
Filesystem tools for the Convention Compiler.

This module contains the discovery, combination and publication steps of the
compile pipeline.
"""
