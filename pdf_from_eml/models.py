"""Typed containers shared across the extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from .headers import HeaderMap


@dataclass(frozen=True)
class MediaType:
    """Parsed ``type/subtype; key=value`` header value."""

    type: str
    subtype: str
    parameters: dict[str, str] = field(default_factory=dict)

    @property
    def essence(self) -> str:
        if not self.subtype:
            return self.type
        return f"{self.type}/{self.subtype}"

    @property
    def is_multipart(self) -> bool:
        return self.type == "multipart"


@dataclass(frozen=True)
class ContentDisposition:
    """Parsed Content-Disposition; an empty disposition means absent or unparseable."""

    disposition: str = ""
    parameters: dict[str, str] = field(default_factory=dict)


@dataclass
class MessagePart:
    """A message or a multipart sub-part: its own headers plus the bytes after them."""

    headers: "HeaderMap"
    body: BinaryIO
    label: str = ""


@dataclass
class ExtractedFile:
    """A PDF written to the output directory."""

    path: Path
    size: int
    part_label: str
    checksum: str


@dataclass
class ExtractionResult:
    """Outcome of processing one EML file."""

    extracted_count: int = 0
    warnings: list[str] = field(default_factory=list)
    files: list[ExtractedFile] = field(default_factory=list)

    def add_file(self, extracted: ExtractedFile) -> None:
        self.files.append(extracted)
        self.extracted_count += 1


@dataclass
class BatchSummary:
    """Totals aggregated over a directory of EML files."""

    files_scanned: int = 0
    files_skipped: int = 0
    extracted_count: int = 0
    warnings: dict[Path, list[str]] = field(default_factory=dict)
    failed: dict[Path, str] = field(default_factory=dict)

    def add(self, eml_path: Path, result: ExtractionResult) -> None:
        self.files_scanned += 1
        self.extracted_count += result.extracted_count
        if result.warnings:
            self.warnings[eml_path] = list(result.warnings)

    @property
    def warning_count(self) -> int:
        return sum(len(items) for items in self.warnings.values())
