"""
Filesystem discovery for the Convention Compiler.

This module lists the Markdown convention files available for combination and
builds the list of candidate target directories offered in the fuzzy picker. The
candidate scan is deliberately shallow and bounded: the search root, its immediate
children, and a capped number of directories from each deeper level.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Union
import logging

from ..exceptions import ConventionsNotFoundError, DiscoveryError
from ..models.config import CompilerConfig
from ..models.convention import ConventionFile


logger = logging.getLogger(__name__)

DEFAULT_CONVENTIONS_DIR = Path("conventions")
CONVENTION_EXTENSION = ".md"

CURRENT_DIR = "."
PARENT_DIR = ".."
CURRENT_DIR_LABEL = ". (current directory)"
PARENT_DIR_LABEL = ".. (parent directory)"
SEARCH_ROOT_PREFIX = "~/"


def find_convention_files(conventions_dir: Union[str, Path] = DEFAULT_CONVENTIONS_DIR) -> List[ConventionFile]:
    """
    List the Markdown files directly inside the conventions directory.

    Args:
        conventions_dir: Directory holding the convention files

    Returns:
        ConventionFile objects sorted by name. Empty if the directory has no
        Markdown files.

    Raises:
        ConventionsNotFoundError: If the directory does not exist
        DiscoveryError: If the directory cannot be read
    """
    conventions_dir = Path(conventions_dir)

    if not conventions_dir.exists():
        raise ConventionsNotFoundError(f"{conventions_dir.name}/ directory not found")

    try:
        entries = list(conventions_dir.iterdir())
    except OSError as e:
        raise DiscoveryError(f"Failed to read {conventions_dir} directory: {e}") from e

    files = [
        ConventionFile.from_path(path)
        for path in entries
        if path.is_file() and path.suffix == CONVENTION_EXTENSION
    ]
    files.sort(key=lambda f: f.name)

    logger.debug(f"Found {len(files)} convention files in {conventions_dir}")
    return files


@dataclass
class CandidateScan:
    """
    Result of a candidate directory scan.

    Attributes:
        directories: Deduplicated, sorted candidate directory strings
        warnings: Non-fatal problems to show the user
    """
    directories: List[str]
    warnings: List[str] = field(default_factory=list)


class DirectoryScanner:
    """
    Scanner that collects target directory candidates under the search root.

    The scan covers ``max_depth`` levels below the search root. Every immediate
    child of the root is taken; from the second level down, at most
    ``max_children`` directories are taken from each subdirectory so large
    trees stay quick to scan.
    """

    def __init__(self, config: CompilerConfig):
        """
        Initialize the directory scanner.

        Args:
            config: Configuration providing the search root and picker options
        """
        self.config = config
        self.options = config.fuzzy_search
        self._stats = {
            'directories_listed': 0,
            'directories_skipped': 0,
            'errors': 0
        }

    def find_candidate_directories(self) -> CandidateScan:
        """
        Build the candidate list for the directory picker.

        Returns:
            CandidateScan with the search root and its subdirectories, plus the
            current and parent directory as fallbacks
        """
        directories: List[str] = []
        warnings: List[str] = []
        root = self.config.get_search_root_path()

        if not root.is_dir():
            message = f"Search root '{self.config.search_root}' doesn't exist, falling back to current directory"
            logger.info(message)
            warnings.append(message)
        else:
            directories.append(str(root))
            directories.extend(str(path) for path in self._walk_levels(root))

        directories.append(CURRENT_DIR)
        directories.append(PARENT_DIR)

        return CandidateScan(directories=sorted(set(directories)), warnings=warnings)

    def _walk_levels(self, root: Path) -> List[Path]:
        """
        Collect subdirectories level by level down to the configured depth.

        Args:
            root: Search root to start from

        Returns:
            Subdirectory paths in discovery order
        """
        found: List[Path] = []
        frontier = [root]

        for depth in range(1, self.options.max_depth + 1):
            next_frontier: List[Path] = []
            for directory in frontier:
                children = self._list_subdirectories(directory)
                if depth > 1:
                    children = children[:self.options.max_children]
                next_frontier.extend(children)
            found.extend(next_frontier)
            frontier = next_frontier

        return found

    def _list_subdirectories(self, directory: Path) -> List[Path]:
        """
        List the visible subdirectories of a directory in name order.

        Unreadable directories yield no children rather than failing the scan.
        """
        try:
            with os.scandir(directory) as entries:
                names = sorted(
                    entry.name for entry in entries
                    if self._is_candidate(entry)
                )
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            self._stats['errors'] += 1
            return []

        self._stats['directories_listed'] += 1
        return [directory / name for name in names]

    def _is_candidate(self, entry: os.DirEntry) -> bool:
        """Check whether a directory entry should be offered."""
        if entry.name.startswith('.') and not self.options.show_hidden:
            self._stats['directories_skipped'] += 1
            return False
        try:
            return entry.is_dir()
        except OSError:
            return False

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the last scans.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()


class CandidateFormatter:
    """
    Converts candidate paths to picker labels and back.

    Paths under the search root are shown as ``~/<relative>``. The conversion is
    exact in both directions for every candidate the scanner produces.
    """

    def __init__(self, search_root: Union[str, Path]):
        root = str(search_root)
        self.search_root = root.rstrip(os.sep) or os.sep
        self._prefix = self.search_root if self.search_root.endswith(os.sep) else self.search_root + os.sep

    def to_display(self, path: str) -> str:
        """Format a candidate directory for display in the picker."""
        if path == CURRENT_DIR:
            return CURRENT_DIR_LABEL
        if path == PARENT_DIR:
            return PARENT_DIR_LABEL
        if path == self.search_root:
            return SEARCH_ROOT_PREFIX
        if path.startswith(self._prefix):
            return SEARCH_ROOT_PREFIX + path[len(self._prefix):]
        return path

    def to_path(self, display: str) -> str:
        """Map a picker label back to the directory it was made from."""
        if display == CURRENT_DIR_LABEL:
            return CURRENT_DIR
        if display == PARENT_DIR_LABEL:
            return PARENT_DIR
        if display == SEARCH_ROOT_PREFIX:
            return self.search_root
        if display.startswith(SEARCH_ROOT_PREFIX):
            return self._prefix + display[len(SEARCH_ROOT_PREFIX):]
        return display
