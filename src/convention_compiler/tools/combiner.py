"""
Combination of convention files into a single Markdown document.
"""

from typing import Iterable, List
import logging

from ..exceptions import CombineError
from ..models.convention import CombinedDocument, ConventionFile


logger = logging.getLogger(__name__)

COMBINED_NAME_SEPARATOR = "_"


def join_documents(texts: Iterable[str]) -> str:
    """
    Concatenate documents with exactly one blank line between them.

    Each text is padded to end in two newlines unless it already does, and
    trailing whitespace of the combined text is trimmed, so ``["a\\n", "b"]``
    becomes ``"a\\n\\nb"``.

    Args:
        texts: Document contents in output order

    Returns:
        The combined text
    """
    parts: List[str] = []
    for text in texts:
        parts.append(text)
        if not text.endswith("\n\n"):
            parts.append("\n" if text.endswith("\n") else "\n\n")
    return "".join(parts).rstrip()


def combined_filename(files: Iterable[ConventionFile]) -> str:
    """Derive the output filename by joining the file stems with underscores."""
    return COMBINED_NAME_SEPARATOR.join(f.stem for f in files) + ".md"


def combine_convention_files(files: List[ConventionFile]) -> CombinedDocument:
    """
    Read and combine convention files in the given order.

    Args:
        files: Selected convention files, in selection order

    Returns:
        CombinedDocument holding the combined text and derived filename

    Raises:
        CombineError: If a file cannot be read
    """
    texts = []
    for convention in files:
        try:
            texts.append(convention.path.read_text(encoding='utf-8'))
        except (OSError, UnicodeDecodeError) as e:
            raise CombineError(f"Failed to read {convention.name}: {e}") from e

    document = CombinedDocument(
        content=join_documents(texts),
        filename=combined_filename(files),
        sources=list(files)
    )
    logger.info(f"Combined {len(files)} convention files into {document.filename}")
    return document
