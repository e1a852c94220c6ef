"""
Data models for convention files, prompt results and publish results.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class ConventionFile(BaseModel):
    """
    A Markdown convention file discovered in the conventions directory.

    Attributes:
        name: File basename, e.g. ``python.md``
        path: Path to the file
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="File basename")
    path: Path = Field(..., description="Path to the convention file")

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'ConventionFile':
        """Create a ConventionFile named after the path's basename."""
        path = Path(path)
        return cls(name=path.name, path=path)

    @property
    def stem(self) -> str:
        """The file name with its extension stripped."""
        return Path(self.name).stem

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Selected:
    """A prompt completed with a value."""
    value: Any


@dataclass(frozen=True)
class Aborted:
    """A prompt cancelled by the user."""
    pass


Selection = Union[Selected, Aborted]


@dataclass
class CombinedDocument:
    """
    Result of combining convention files.

    Attributes:
        content: Combined Markdown text
        filename: Derived output filename, e.g. ``python_testing.md``
        sources: The files that were combined, in order
    """
    content: str
    filename: str
    sources: List[ConventionFile] = field(default_factory=list)


@dataclass
class PublishResult:
    """
    What a publish step produced in the target directory.

    Attributes:
        target_dir: Directory the document was published into
        written: Files written with content
        links: (link, points_to) pairs of created symlinks
        skipped: Human-readable notes about steps that were skipped
    """
    target_dir: Path
    written: List[Path] = field(default_factory=list)
    links: List[Tuple[Path, Path]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
