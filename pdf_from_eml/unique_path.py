"""Collision-free output paths: ``name.pdf``, ``name_1.pdf``, ``name_2.pdf`` ..."""

from __future__ import annotations

import itertools
import logging
from pathlib import Path
from typing import BinaryIO, Iterator

logger = logging.getLogger(__name__)


def candidate_paths(path: Path) -> Iterator[Path]:
    """Yield ``path`` followed by ``<stem>_1<suffix>``, ``<stem>_2<suffix>`` ..."""
    stem, suffix = path.stem, path.suffix
    # ".pdf" is an extension with an empty base: "_1.pdf", not ".pdf_1".
    if not suffix and stem.startswith("."):
        stem, suffix = "", stem
    yield path
    for counter in itertools.count(1):
        yield path.with_name(f"{stem}_{counter}{suffix}")


def unique_path(path: str | Path) -> Path:
    """Return the first candidate of ``path`` that does not exist right now.

    Nothing is reserved: another process may take the name before it is
    used. Writers that can race should call :func:`create_unique`.
    """
    for candidate in candidate_paths(Path(path)):
        if not candidate.exists():
            return candidate


def create_unique(path: str | Path) -> tuple[Path, BinaryIO]:
    """Create and open the first free candidate of ``path`` exclusively.

    Returns the chosen path and the open binary file. An existing file is
    never truncated.
    """
    for candidate in candidate_paths(Path(path)):
        try:
            handle = open(candidate, "xb")
        except FileExistsError:
            logger.debug("Output name %s taken, trying next suffix", candidate.name)
            continue
        return candidate, handle
