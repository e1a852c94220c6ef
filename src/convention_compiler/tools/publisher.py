"""
Publication strategies for combined convention documents.

Two strategies exist and exactly one is used per run:

- SymlinkPublisher writes the combined document into ``combined_conventions/`` and
  points CONVENTIONS.md, AGENTS.md and CLAUDE.md in the target directory at it,
  mirroring ``conventions/agents`` as an ``AGENTS`` folder link.
- DirectPublisher writes the combined text straight into ``<target>/AGENTS.md``.

Both are idempotent: publishing the same selection twice leaves the target in the
same state and does not fail on the second run.
"""

import shutil
from pathlib import Path
from typing import Dict, List, Sequence, Type, Union
import logging

from ..exceptions import PublishError
from ..models.convention import CombinedDocument, PublishResult


logger = logging.getLogger(__name__)

DEFAULT_COMBINED_DIR = Path("combined_conventions")
DEFAULT_LINK_NAMES = ("CONVENTIONS.md", "AGENTS.md", "CLAUDE.md")
DEFAULT_AGENTS_SOURCE = Path("conventions") / "agents"
DEFAULT_AGENTS_LINK_NAME = "AGENTS"
DIRECT_OUTPUT_NAME = "AGENTS.md"


def remove_existing(path: Path, allow_directory: bool = False) -> bool:
    """
    Remove a file, symlink or directory tree at ``path`` if anything is there.

    Symlinks are removed without following them, including dangling ones. A real
    directory is only removed when ``allow_directory`` is set.

    Raises:
        IsADirectoryError: If ``path`` is a directory and ``allow_directory`` is False

    Returns:
        True if something was removed
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        if not allow_directory:
            raise IsADirectoryError(f"{path} is a directory")
        shutil.rmtree(path)
        return True
    return False


class Publisher:
    """Base class for publication strategies."""

    name = "publisher"

    def describe(self, target_dir: Path) -> List[str]:
        """List the destinations this publisher will write in the target directory."""
        raise NotImplementedError

    def publish(self, document: CombinedDocument, target_dir: Union[str, Path]) -> PublishResult:
        """
        Publish a combined document into the target directory.

        Raises:
            PublishError: If any filesystem step fails
        """
        raise NotImplementedError

    def _ensure_target_dir(self, target_dir: Path) -> None:
        """Create the target directory if absent."""
        if target_dir.is_dir():
            return
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PublishError(f"Failed to create target directory {target_dir}: {e}") from e
        logger.info(f"Created target directory {target_dir}")


class SymlinkPublisher(Publisher):
    """
    Publishes by writing a combined file and symlinking conventional names to it.

    Attributes:
        combined_dir: Directory holding combined documents
        link_names: File names linked in the target directory
        agents_source: Directory mirrored into the target as a folder link
        agents_link_name: Name of the folder link
    """

    name = "symlink"

    def __init__(self,
                 combined_dir: Union[str, Path] = DEFAULT_COMBINED_DIR,
                 link_names: Sequence[str] = DEFAULT_LINK_NAMES,
                 agents_source: Union[str, Path] = DEFAULT_AGENTS_SOURCE,
                 agents_link_name: str = DEFAULT_AGENTS_LINK_NAME):
        self.combined_dir = Path(combined_dir)
        self.link_names = tuple(link_names)
        self.agents_source = Path(agents_source)
        self.agents_link_name = agents_link_name

    def describe(self, target_dir: Path) -> List[str]:
        destinations = [str(target_dir / name) for name in self.link_names]
        destinations.append(f"{target_dir / self.agents_link_name} (folder)")
        return destinations

    def publish(self, document: CombinedDocument, target_dir: Union[str, Path]) -> PublishResult:
        target_dir = Path(target_dir)
        self._ensure_target_dir(target_dir)
        result = PublishResult(target_dir=target_dir)

        combined_path = self._write_combined(document)
        result.written.append(combined_path)

        try:
            absolute_combined = combined_path.resolve(strict=True)
        except OSError as e:
            raise PublishError(f"Failed to get absolute path for {combined_path}: {e}") from e

        for name in self.link_names:
            link = target_dir / name
            self._replace_with_symlink(link, absolute_combined, name)
            result.links.append((link, absolute_combined))

        if self.agents_source.is_dir():
            link = target_dir / self.agents_link_name
            try:
                absolute_agents = self.agents_source.resolve(strict=True)
            except OSError as e:
                raise PublishError(f"Failed to get absolute path for {self.agents_source}: {e}") from e
            self._replace_with_symlink(link, absolute_agents, self.agents_link_name, is_directory=True)
            result.links.append((link, absolute_agents))
        else:
            note = f"Skipped {self.agents_link_name} symlink: {self.agents_source} folder not found"
            logger.info(note)
            result.skipped.append(note)

        return result

    def _write_combined(self, document: CombinedDocument) -> Path:
        """Write the combined document into the combined directory."""
        try:
            self.combined_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PublishError(f"Failed to create {self.combined_dir} directory: {e}") from e

        combined_path = self.combined_dir / document.filename
        try:
            combined_path.write_text(document.content, encoding='utf-8')
        except OSError as e:
            raise PublishError(f"Failed to write combined file {document.filename}: {e}") from e

        logger.info(f"Wrote combined file {combined_path}")
        return combined_path

    def _replace_with_symlink(self, link: Path, points_to: Path, label: str,
                              is_directory: bool = False) -> None:
        """Remove whatever is at ``link`` and create a symlink to ``points_to``."""
        try:
            if remove_existing(link, allow_directory=is_directory):
                logger.debug(f"Removed existing {link}")
        except OSError as e:
            raise PublishError(f"Failed to remove existing {label}: {e}") from e

        try:
            link.symlink_to(points_to, target_is_directory=is_directory)
        except OSError as e:
            raise PublishError(f"Failed to create symlink for {label}: {e}") from e

        logger.info(f"Linked {link} -> {points_to}")


class DirectPublisher(Publisher):
    """
    Publishes by writing the combined text directly into the target directory.

    Attributes:
        filename: Name of the file written in the target directory
    """

    name = "write"

    def __init__(self, filename: str = DIRECT_OUTPUT_NAME):
        self.filename = filename

    def describe(self, target_dir: Path) -> List[str]:
        return [str(target_dir / self.filename)]

    def publish(self, document: CombinedDocument, target_dir: Union[str, Path]) -> PublishResult:
        target_dir = Path(target_dir)
        self._ensure_target_dir(target_dir)
        output_path = target_dir / self.filename

        # Writing through a link left by a symlink run would overwrite the shared combined file
        if output_path.is_symlink():
            try:
                output_path.unlink()
            except OSError as e:
                raise PublishError(f"Failed to remove existing {self.filename} symlink: {e}") from e

        try:
            output_path.write_text(document.content, encoding='utf-8')
        except OSError as e:
            raise PublishError(f"Failed to write {output_path}: {e}") from e

        logger.info(f"Wrote {output_path}")
        return PublishResult(target_dir=target_dir, written=[output_path])


PUBLISHERS: Dict[str, Type[Publisher]] = {
    SymlinkPublisher.name: SymlinkPublisher,
    DirectPublisher.name: DirectPublisher,
}


def get_publisher(command: str) -> Publisher:
    """
    Create the publisher for a CLI command.

    Raises:
        ValueError: If the command has no publisher
    """
    try:
        return PUBLISHERS[command]()
    except KeyError as e:
        raise ValueError(f"Unknown publish command: {command}") from e
