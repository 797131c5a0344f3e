"""Utility helpers shared across modules."""

from __future__ import annotations

import os
from hashlib import sha256
from pathlib import Path


def sha256_hex(payload: bytes) -> str:
    """Convenience wrapper for hex digests."""
    return sha256(payload).hexdigest()


def fallback_pdf_name(eml_path: str | os.PathLike[str], whole_body: bool = False) -> str:
    """Build the name used for a PDF that carries no filename of its own."""
    source = os.path.basename(os.fspath(eml_path)).replace(".", "_")
    prefix = "unnamed_body_pdf" if whole_body else "unnamed_pdf"
    return f"{prefix}_{source}.pdf"


def strip_directories(filename: str) -> str:
    """Drop any directory components so a name cannot escape the output directory."""
    name = filename.replace("\x00", "").replace("\\", "/").rsplit("/", 1)[-1].strip()
    if name in {".", ".."}:
        return ""
    return name


def has_extension(path: Path, extensions: tuple[str, ...]) -> bool:
    """Case-insensitive suffix match against dotted extensions."""
    return path.suffix.lower() in extensions
