"""
Exception hierarchy for the Convention Compiler.

Every error the CLI knows how to report derives from ConventionCompilerError,
so the entry point can print a readable message and exit non-zero without
catching unrelated programming errors.
"""


class ConventionCompilerError(Exception):
    """Base class for all errors reported to the user."""
    pass


class ConfigurationError(ConventionCompilerError):
    """Raised when configuration parsing, validation or persistence fails."""
    pass


class DiscoveryError(ConventionCompilerError):
    """Raised when convention files cannot be listed."""
    pass


class ConventionsNotFoundError(DiscoveryError):
    """Raised when the conventions directory does not exist."""
    pass


class CombineError(ConventionCompilerError):
    """Raised when a selected convention file cannot be read."""
    pass


class PublishError(ConventionCompilerError):
    """Raised when writing the combined file or creating a symlink fails."""
    pass
