import io

import pytest

from pdf_from_eml.charsets import DEFAULT_REGISTRY, CharsetRegistry
from pdf_from_eml.errors import UnsupportedCharsetError


@pytest.mark.parametrize("label", ["utf-8", "UTF-8", " utf8 ", "ISO-8859-1", "latin1", "shift_jis", "windows-1252"])
def test_common_charsets_resolve(label):
    assert label in DEFAULT_REGISTRY


def test_decode_latin1():
    assert DEFAULT_REGISTRY.lookup("ISO-8859-1").decode(b"M\xe4rz") == "März"


def test_open_streams_utf8_bytes():
    source = io.BytesIO("日本語.pdf".encode("shift_jis"))
    transcoded = DEFAULT_REGISTRY.lookup("Shift_JIS").open(source).read()
    assert transcoded == "日本語.pdf".encode("utf-8")


def test_whatwg_aliases():
    assert DEFAULT_REGISTRY.lookup("x-sjis").name == "shift_jis"
    assert DEFAULT_REGISTRY.lookup("unicode-1-1-utf-8").decode("é".encode("utf-8")) == "é"


@pytest.mark.parametrize("label", ["invalid-charset", "", "base64", "zlib", "rot13"])
def test_unknown_or_non_text_codecs_are_unsupported(label):
    with pytest.raises(UnsupportedCharsetError):
        DEFAULT_REGISTRY.lookup(label)
    assert label not in DEFAULT_REGISTRY


def test_unsupported_charset_is_a_lookup_error():
    with pytest.raises(LookupError):
        DEFAULT_REGISTRY.lookup("x-no-such-charset")


def test_registered_charset_needs_no_codec():
    registry = CharsetRegistry(use_python_codecs=False)
    registry.register("x-shout", lambda stream: io.BytesIO(stream.read().upper()))
    assert registry.lookup("X-SHOUT").decode(b"abc") == "ABC"
    with pytest.raises(UnsupportedCharsetError):
        registry.lookup("utf-8")


def test_alias_to_registered_charset():
    registry = CharsetRegistry(use_python_codecs=False)
    registry.register("x-shout", lambda stream: io.BytesIO(stream.read().upper()))
    registry.alias("loud", "x-shout")
    assert registry.lookup("LOUD").decode(b"quiet") == "QUIET"


def test_label_with_nul_is_unsupported():
    with pytest.raises(UnsupportedCharsetError):
        DEFAULT_REGISTRY.lookup("utf-8\x00")
    assert "utf-8\x00" not in DEFAULT_REGISTRY


@pytest.mark.parametrize(
    ("label", "data"),
    [
        ("utf-8", b"report\xc3"),
        ("utf-16", "ab".encode("utf-16") + b"x"),
        ("shift_jis", "請求".encode("shift_jis")[:-1]),
    ],
)
def test_truncated_trailing_sequence_raises(label, data):
    with pytest.raises(UnicodeDecodeError):
        DEFAULT_REGISTRY.lookup(label).decode(data)


class OneByteReads(io.BytesIO):
    def read(self, size=-1):
        return super().read(1)


@pytest.mark.parametrize("label", ["utf-8", "utf-16", "shift_jis"])
def test_open_handles_sequences_split_across_reads(label):
    text = "請求書 2024.pdf"
    reader = DEFAULT_REGISTRY.lookup(label).open(OneByteReads(text.encode(label)))
    assert reader.read() == text.encode("utf-8")
