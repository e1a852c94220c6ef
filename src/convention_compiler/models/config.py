"""
Configuration data models for the Convention Compiler.

This module defines the settings read from config.yaml: the search root used to
discover target directories and the display options of the fuzzy directory picker.
"""

from typing import Dict, Any
from pathlib import Path
from pydantic import BaseModel, Field, field_validator


DEFAULT_SEARCH_ROOT = "~/Code"

# Number of directory levels below the search root offered in the picker
DEFAULT_MAX_DEPTH = 2

# Breadth cap per subdirectory, applied from the second level downward
DEFAULT_MAX_CHILDREN = 10


class FuzzySearchConfig(BaseModel):
    """
    Display options for the fuzzy target-directory picker.

    Attributes:
        show_hidden: Whether dot-directories are offered as candidates
        max_depth: Directory levels below the search root to scan
        max_children: Maximum child directories taken from each subdirectory
        prompt: Prompt text shown in the picker's search line
    """

    show_hidden: bool = Field(False, description="Offer hidden directories as candidates")
    max_depth: int = Field(DEFAULT_MAX_DEPTH, ge=0, le=10, description="Directory levels below the search root")
    max_children: int = Field(DEFAULT_MAX_CHILDREN, gt=0, description="Child directories taken per subdirectory")
    prompt: str = Field("Select directory > ", description="Prompt text for the directory picker")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class CompilerConfig(BaseModel):
    """
    Main configuration class for the Convention Compiler.

    Attributes:
        search_root: Base directory under which target directories are discovered
        fuzzy_search: Options for the directory picker
    """

    search_root: str = Field(DEFAULT_SEARCH_ROOT, validate_default=True, description="Base directory for target discovery")
    fuzzy_search: FuzzySearchConfig = Field(default_factory=FuzzySearchConfig, description="Directory picker options")

    @field_validator('search_root')
    @classmethod
    def validate_search_root(cls, v: str) -> str:
        """Expand the user directory and drop trailing separators."""
        if not v or not v.strip():
            raise ValueError("search_root cannot be empty")
        return str(Path(v.strip()).expanduser())

    def get_search_root_path(self) -> Path:
        """Get the search root as a Path."""
        return Path(self.search_root)

    def search_root_exists(self) -> bool:
        """Check whether the search root is an existing directory."""
        return self.get_search_root_path().is_dir()

    def validate_configuration(self) -> list[str]:
        """
        Collect non-fatal configuration warnings.

        Returns:
            List of warning messages
        """
        warnings = []
        if not self.search_root_exists():
            warnings.append(
                f"Search root '{self.search_root}' doesn't exist, falling back to current directory"
            )
        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        data = self.model_dump()
        data['fuzzy_search'] = self.fuzzy_search.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompilerConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        parts = [f"Search root: {self.search_root}"]
        parts.append(f"Max depth: {self.fuzzy_search.max_depth}")
        parts.append(f"Show hidden: {self.fuzzy_search.show_hidden}")
        return " | ".join(parts)
