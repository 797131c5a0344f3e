"""Charset lookup: map a charset label to a streaming transcoder into UTF-8."""

from __future__ import annotations

import codecs
import io
import logging
from dataclasses import dataclass
from functools import partial
from typing import BinaryIO, Callable, Mapping

from .errors import UnsupportedCharsetError

logger = logging.getLogger(__name__)

TranscoderFactory = Callable[[BinaryIO], BinaryIO]

_CHUNK_SIZE = 8 * 1024

# Labels that mail clients emit (WHATWG encoding labels) but Python's codec
# registry does not resolve to the intended codec on its own.
WHATWG_ALIASES: dict[str, str] = {
    "unicode-1-1-utf-8": "utf-8",
    "unicode11utf8": "utf-8",
    "unicode20utf8": "utf-8",
    "x-unicode20utf8": "utf-8",
    "x-sjis": "shift_jis",
    "csshiftjis": "shift_jis",
    "windows-31j": "cp932",
    "x-euc-jp": "euc_jp",
    "x-gbk": "gbk",
    "gb_2312-80": "gbk",
    "ks_c_5601-1987": "cp949",
    "ks_c_5601-1989": "cp949",
    "windows-949": "cp949",
    "x-mac-roman": "mac_roman",
    "x-mac-cyrillic": "mac_cyrillic",
    "x-mac-ukrainian": "mac_cyrillic",
    "x-cp1250": "cp1250",
    "x-cp1251": "cp1251",
    "x-cp1252": "cp1252",
    "dos-874": "cp874",
    "iso-ir-149": "cp949",
}


class _TranscodingReader(io.RawIOBase):
    """Decode ``raw`` with ``codec_name`` and hand out the text as UTF-8.

    The decoder is flushed at end of input, so a truncated trailing
    sequence raises :class:`UnicodeDecodeError` instead of vanishing.
    """

    def __init__(self, raw: BinaryIO, codec_name: str, chunk_size: int = _CHUNK_SIZE) -> None:
        super().__init__()
        self._raw = raw
        self._decoder = codecs.getincrementaldecoder(codec_name)("strict")
        self._chunk_size = chunk_size
        self._encoded = b""
        self._exhausted = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._encoded and not self._exhausted:
            chunk = self._raw.read(self._chunk_size)
            if not chunk:
                self._exhausted = True
            self._encoded = self._decoder.decode(chunk, final=not chunk).encode("utf-8")
        size = min(len(buffer), len(self._encoded))
        buffer[:size] = self._encoded[:size]
        self._encoded = self._encoded[size:]
        return size


def _codec_transcoder(codec_name: str, stream: BinaryIO) -> BinaryIO:
    return _TranscodingReader(stream, codec_name)


@dataclass(frozen=True)
class Charset:
    """A resolved charset: canonical name plus a transcoder factory."""

    name: str
    factory: TranscoderFactory

    def open(self, stream: BinaryIO) -> BinaryIO:
        """Wrap ``stream`` so reads return UTF-8 bytes."""
        return self.factory(stream)

    def decode(self, data: bytes) -> str:
        return self.open(io.BytesIO(data)).read().decode("utf-8")


class CharsetRegistry:
    """Case-insensitive lookup from charset label to :class:`Charset`."""

    def __init__(
        self,
        aliases: Mapping[str, str] | None = None,
        use_python_codecs: bool = True,
    ) -> None:
        self._charsets: dict[str, Charset] = {}
        self._aliases = {label.lower(): target for label, target in (aliases or {}).items()}
        self.use_python_codecs = use_python_codecs

    def register(self, label: str, factory: TranscoderFactory, name: str | None = None) -> Charset:
        charset = Charset(name=name or label.lower(), factory=factory)
        self._charsets[label.strip().lower()] = charset
        return charset

    def alias(self, label: str, target: str) -> None:
        self._aliases[label.strip().lower()] = target

    def lookup(self, label: str) -> Charset:
        """Resolve ``label`` or raise :class:`UnsupportedCharsetError`."""
        key = (label or "").strip().lower()
        if not key:
            raise UnsupportedCharsetError(label)
        if key in self._charsets:
            return self._charsets[key]

        target = self._aliases.get(key, key)
        if target in self._charsets:
            return self._charsets[target]
        if not self.use_python_codecs:
            raise UnsupportedCharsetError(label)

        # A NUL inside the label surfaces as ValueError.
        try:
            info = codecs.lookup(target)
        except (LookupError, ValueError) as exc:
            raise UnsupportedCharsetError(label) from exc
        # Bytes-to-bytes codecs such as base64 or zlib are not charsets.
        if not getattr(info, "_is_text_encoding", True):
            raise UnsupportedCharsetError(label)

        logger.debug("Resolved charset %r to codec %s", label, info.name)
        return Charset(name=info.name, factory=partial(_codec_transcoder, info.name))

    def __contains__(self, label: object) -> bool:
        if not isinstance(label, str):
            return False
        try:
            self.lookup(label)
        except UnsupportedCharsetError:
            return False
        return True


def default_registry() -> CharsetRegistry:
    """Registry covering Python's text codecs plus common WHATWG labels."""
    return CharsetRegistry(aliases=WHATWG_ALIASES)


DEFAULT_REGISTRY = default_registry()
