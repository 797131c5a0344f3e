import base64
import hashlib
import io
import os

import pytest

from pdf_from_eml.content import Base64Reader, copy_content, open_content
from pdf_from_eml.errors import ContentDecodeError
from pdf_from_eml.headers import HeaderMap
from pdf_from_eml.models import MessagePart


def _part(body: bytes, encoding: str | None = None) -> MessagePart:
    headers = HeaderMap()
    if encoding is not None:
        headers.add("Content-Transfer-Encoding", encoding)
    return MessagePart(headers=headers, body=io.BytesIO(body))


@pytest.mark.parametrize("size", [0, 1, 2, 3, 57, 100, 5000])
@pytest.mark.parametrize("chunk_size", [3, 7, 64 * 1024])
def test_base64_reader_matches_standard_decoder(size, chunk_size):
    data = os.urandom(size)
    encoded = base64.encodebytes(data).replace(b"\n", b"\r\n")
    decoded = Base64Reader(io.BytesIO(encoded), chunk_size=chunk_size).read()
    assert decoded == base64.b64decode(encoded)


@pytest.mark.parametrize("encoded", [b"SGVsbG8@", b"SGVsbG8", b"SGVs\r\nbG8=QQ=="])
def test_base64_reader_rejects_malformed_input(encoded):
    with pytest.raises(ContentDecodeError):
        Base64Reader(io.BytesIO(encoded)).read()


def test_content_decode_error_is_an_os_error():
    with pytest.raises(OSError):
        Base64Reader(io.BytesIO(b"!!!!")).read()


@pytest.mark.parametrize("encoding", ["base64", "BASE64", " Base64 "])
def test_open_content_decodes_base64_case_insensitively(encoding, sample_pdf):
    reader = open_content(_part(base64.b64encode(sample_pdf), encoding))
    assert reader.read() == sample_pdf


@pytest.mark.parametrize("encoding", [None, "7bit", "binary", "quoted-printable"])
def test_open_content_passes_other_encodings_through(encoding):
    body = b"%PDF-1.4 =3D raw"
    assert open_content(_part(body, encoding)).read() == body


def test_copy_content_counts_and_hashes(sample_pdf):
    target = io.BytesIO()
    digest = hashlib.sha256()
    written = copy_content(io.BytesIO(sample_pdf), target, digest)
    assert written == len(sample_pdf)
    assert target.getvalue() == sample_pdf
    assert digest.hexdigest() == hashlib.sha256(sample_pdf).hexdigest()
