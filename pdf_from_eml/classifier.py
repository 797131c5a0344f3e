"""Decide whether a MIME part is an extractable PDF attachment."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .charsets import DEFAULT_REGISTRY, CharsetRegistry
from .errors import HeaderParseError
from .headers import parse_disposition, parse_media_type
from .models import ContentDisposition, MediaType, MessagePart

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
ATTACHMENT = "attachment"


@dataclass
class Classification:
    """Parsed headers of a part plus the verdict and any parse problems."""

    is_pdf: bool
    media_type: MediaType | None
    disposition: ContentDisposition
    content_type_error: str | None = None
    disposition_error: str | None = None


def is_pdf_attachment(media_type: MediaType, disposition: ContentDisposition) -> bool:
    """Return True for ``application/pdf`` parts meant to be saved as files.

    The part must either be disposed as an attachment, or carry no
    disposition at all and name itself through the Content-Type ``name``
    parameter. Inline PDFs without a name are left alone.
    """
    if media_type.essence != PDF_MEDIA_TYPE:
        return False
    if disposition.disposition == ATTACHMENT:
        return True
    return disposition.disposition == "" and bool(media_type.parameters.get("name"))


def raw_filename(media_type: MediaType, disposition: ContentDisposition) -> str:
    """Pick the undecoded filename: disposition ``filename`` first, then ``name``."""
    filename = disposition.parameters.get("filename") or media_type.parameters.get("name") or ""
    return filename.strip()


def classify_part(part: MessagePart, registry: CharsetRegistry = DEFAULT_REGISTRY) -> Classification:
    """Parse the Content-Type/Content-Disposition of ``part`` and classify it."""
    disposition = ContentDisposition()
    disposition_error = None
    disposition_value = part.headers.get("Content-Disposition")
    if disposition_value:
        try:
            disposition = parse_disposition(disposition_value, registry)
        except HeaderParseError as exc:
            disposition_error = f"could not parse Content-Disposition {disposition_value!r}: {exc}"

    content_type = part.headers.get("Content-Type")
    if not content_type:
        # RFC 2045 default of text/plain, never a PDF.
        logger.debug("Part %r has no Content-Type; treating as text/plain", part.label)
        return Classification(False, None, disposition, disposition_error=disposition_error)
    try:
        media_type = parse_media_type(content_type, registry)
    except HeaderParseError as exc:
        return Classification(
            False,
            None,
            disposition,
            content_type_error=f"could not parse Content-Type {content_type!r}: {exc}",
            disposition_error=disposition_error,
        )

    verdict = is_pdf_attachment(media_type, disposition)
    logger.debug(
        "Part %r: type=%s disposition=%r pdf_attachment=%s",
        part.label,
        media_type.essence,
        disposition.disposition,
        verdict,
    )
    return Classification(verdict, media_type, disposition, disposition_error=disposition_error)
