"""
Pytest configuration and shared fixtures.
"""
import base64
import os
import sys

import pytest

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from pdf_from_eml.extractor import PdfExtractor  # noqa: E402

SAMPLE_PDF = (
    b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"
    b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    b"trailer\n<< /Root 1 0 R >>\n%%EOF\n"
)


class EmlFactory:
    """Builds raw RFC 5322 messages with CRLF line endings."""

    pdf = SAMPLE_PDF

    @staticmethod
    def b64(data: bytes) -> bytes:
        return base64.encodebytes(data).replace(b"\n", b"\r\n").rstrip(b"\r\n")

    @staticmethod
    def entity(headers, body: bytes) -> bytes:
        if isinstance(headers, dict):
            headers = list(headers.items())
        head = "".join(f"{name}: {value}\r\n" for name, value in headers)
        return head.encode("utf-8") + b"\r\n" + body

    def pdf_part(
        self,
        filename="a.pdf",
        data: bytes = SAMPLE_PDF,
        disposition="attachment",
        name_param=True,
        encoding="base64",
    ) -> bytes:
        content_type = "application/pdf"
        if name_param and filename:
            content_type += f'; name="{filename}"'
        headers = {"Content-Type": content_type}
        if disposition:
            value = disposition
            if filename:
                value += f'; filename="{filename}"'
            headers["Content-Disposition"] = value
        if encoding:
            headers["Content-Transfer-Encoding"] = encoding
        body = self.b64(data) if encoding == "base64" else data
        return self.entity(headers, body)

    def text_part(self, text="Please find the invoice attached.") -> bytes:
        return self.entity({"Content-Type": 'text/plain; charset="utf-8"'}, text.encode("utf-8"))

    def multipart(
        self,
        parts,
        boundary="X",
        content_type=None,
        preamble=b"This is a multi-part message in MIME format.\r\n",
        closed=True,
    ) -> bytes:
        headers = {
            "From": "billing@example.com",
            "To": "accounts@example.com",
            "Subject": "Invoice",
            "MIME-Version": "1.0",
            "Content-Type": content_type or f'multipart/mixed; boundary="{boundary}"',
        }
        delimiter = b"--" + boundary.encode("ascii")
        body = preamble
        for part in parts:
            body += delimiter + b"\r\n" + part + b"\r\n"
        if closed:
            body += delimiter + b"--\r\n"
        return self.entity(headers, body)


@pytest.fixture
def eml():
    return EmlFactory()


@pytest.fixture
def sample_pdf():
    return SAMPLE_PDF


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def extractor(output_dir):
    return PdfExtractor(output_dir)
