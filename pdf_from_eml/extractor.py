"""Extract PDF attachments from a single EML message."""

from __future__ import annotations

import hashlib
import io
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from .charsets import DEFAULT_REGISTRY, CharsetRegistry
from .classifier import classify_part, raw_filename
from .content import copy_content, open_content
from .encoded_words import decode_filename
from .errors import HeaderParseError, MissingBoundaryError
from .headers import parse_header_block, parse_media_type, split_message
from .mime_walker import MimeWalker
from .models import ContentDisposition, ExtractedFile, ExtractionResult, MediaType, MessagePart
from .unique_path import create_unique
from .utils import fallback_pdf_name, strip_directories

logger = logging.getLogger(__name__)


@dataclass
class _MessageRun:
    """State of one message being processed."""

    source_path: str
    result: ExtractionResult = field(default_factory=ExtractionResult)

    def warn(self, label: str, message: str) -> None:
        where = f"{self.source_path} part {label}" if label else self.source_path
        text = f"{where}: {message}"
        logger.warning("%s", text)
        self.result.warnings.append(text)


class PdfExtractor:
    """Write the PDF attachments of EML messages into ``output_dir``.

    The output directory must already exist. Each call returns an
    :class:`ExtractionResult`; recoverable problems become warnings and
    never discard PDFs already written.
    """

    def __init__(
        self,
        output_dir: str | os.PathLike[str],
        *,
        recursive: bool = False,
        registry: CharsetRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.recursive = recursive
        self.registry = registry

    def extract_file(self, eml_path: str | os.PathLike[str]) -> ExtractionResult:
        try:
            with open(eml_path, "rb") as stream:
                data = stream.read()
        except OSError as exc:
            run = _MessageRun(os.fspath(eml_path))
            run.warn("", f"could not read EML file: {exc}")
            return run.result
        return self.extract_bytes(data, eml_path)

    def extract_stream(self, stream: BinaryIO, source_path: str | os.PathLike[str]) -> ExtractionResult:
        return self.extract_bytes(stream.read(), source_path)

    def extract_bytes(self, data: bytes, source_path: str | os.PathLike[str]) -> ExtractionResult:
        """Extract every PDF attachment of the raw message ``data``.

        ``source_path`` names the message in warnings and fallback filenames.
        """
        run = _MessageRun(os.fspath(source_path))
        block, body = split_message(data)

        try:
            headers = parse_header_block(block)
        except HeaderParseError as exc:
            run.warn("", f"could not parse message headers ({exc}); trying the whole body")
            message = MessagePart(parse_header_block(block, strict=False), io.BytesIO(body))
            self._extract_part(run, message, whole_body=True)
            return run.result
        message = MessagePart(headers, io.BytesIO(body))

        content_type = headers.get("Content-Type")
        try:
            media_type = parse_media_type(content_type, self.registry)
        except HeaderParseError as exc:
            logger.debug("Content-Type %r of %s unusable (%s); trying the whole body", content_type, run.source_path, exc)
            self._extract_part(run, message, whole_body=True)
            return run.result

        if not media_type.is_multipart:
            self._extract_part(run, message, whole_body=True)
            return run.result

        walker = MimeWalker(run.warn, recursive=self.recursive, registry=self.registry)
        try:
            for part in walker.walk(message, media_type):
                self._extract_part(run, part, whole_body=False)
        except MissingBoundaryError as exc:
            run.warn("", str(exc))
        return run.result

    def _extract_part(self, run: _MessageRun, part: MessagePart, whole_body: bool) -> None:
        classification = classify_part(part, self.registry)
        if classification.disposition_error:
            run.warn(part.label, classification.disposition_error)
        if classification.content_type_error and not whole_body:
            run.warn(part.label, classification.content_type_error)
        media_type = classification.media_type
        if not classification.is_pdf or media_type is None:
            return

        filename = self._resolve_filename(run, part, media_type, classification.disposition, whole_body)
        try:
            extracted = self._write(part, filename)
        except OSError as exc:
            run.warn(part.label, f"could not write PDF {filename!r}: {exc}")
            return
        run.result.add_file(extracted)
        logger.info("Extracted PDF: %s (%d bytes)", extracted.path, extracted.size)

    def _resolve_filename(
        self,
        run: _MessageRun,
        part: MessagePart,
        media_type: MediaType,
        disposition: ContentDisposition,
        whole_body: bool,
    ) -> str:
        raw = raw_filename(media_type, disposition)
        filename = ""
        if raw:
            decoded = decode_filename(raw, self.registry)
            if decoded.error:
                run.warn(part.label, f"could not decode filename {raw!r} ({decoded.error}); using it as is")
            filename = strip_directories(decoded.text)

        if not filename:
            filename = fallback_pdf_name(run.source_path, whole_body=whole_body)
            run.warn(part.label, f"PDF has no filename, using {filename!r}")
        return filename

    def _write(self, part: MessagePart, filename: str) -> ExtractedFile:
        target, handle = create_unique(self.output_dir / filename)
        digest = hashlib.sha256()
        try:
            with handle:
                size = copy_content(open_content(part), handle, digest)
        except OSError:
            target.unlink(missing_ok=True)
            raise
        return ExtractedFile(path=target, size=size, part_label=part.label, checksum=digest.hexdigest())


def extract_pdfs_from_eml(
    eml_path: str | os.PathLike[str],
    output_dir: str | os.PathLike[str],
    *,
    recursive: bool = False,
) -> ExtractionResult:
    """Convenience wrapper: extract the PDFs of one EML file into ``output_dir``."""
    return PdfExtractor(output_dir, recursive=recursive).extract_file(eml_path)
