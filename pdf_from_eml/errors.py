"""Error kinds raised while extracting PDFs from EML files."""

from __future__ import annotations


class PdfFromEmlError(Exception):
    """Base class for every recoverable extraction error."""


class HeaderParseError(PdfFromEmlError):
    """A header block or a structured header value could not be parsed."""


class MissingBoundaryError(PdfFromEmlError):
    """A multipart entity declared no boundary parameter."""


class UnsupportedCharsetError(PdfFromEmlError, LookupError):
    """No decoder is registered for the requested charset."""

    def __init__(self, charset: str) -> None:
        super().__init__(f"unhandled charset {charset!r}")
        self.charset = charset


class EncodedWordError(PdfFromEmlError, ValueError):
    """An RFC 2047 encoded-word could not be decoded."""


class ContentDecodeError(PdfFromEmlError, OSError):
    """A part body could not be decoded from its transfer encoding."""
