"""Transfer-encoding aware access to part bodies."""

from __future__ import annotations

import base64
import binascii
import io
import re
from typing import BinaryIO

from .errors import ContentDecodeError
from .models import MessagePart

CHUNK_SIZE = 64 * 1024
_WHITESPACE = re.compile(rb"\s+")


class Base64Reader(io.RawIOBase):
    """Decode standard-alphabet base64 from ``raw`` while it is read.

    Line breaks and other whitespace between groups are ignored. Malformed
    input raises :class:`ContentDecodeError` from the read that meets it.
    """

    def __init__(self, raw: BinaryIO, chunk_size: int = CHUNK_SIZE) -> None:
        super().__init__()
        self._raw = raw
        self._chunk_size = chunk_size
        self._pending = b""
        self._decoded = b""
        self._exhausted = False

    def readable(self) -> bool:
        return True

    def _fill(self) -> None:
        while not self._decoded and not self._exhausted:
            chunk = self._raw.read(self._chunk_size)
            if chunk:
                encoded = self._pending + _WHITESPACE.sub(b"", chunk)
                cut = len(encoded) - len(encoded) % 4
                encoded, self._pending = encoded[:cut], encoded[cut:]
            else:
                self._exhausted = True
                encoded, self._pending = self._pending, b""
            if not encoded:
                continue
            try:
                self._decoded = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ContentDecodeError(f"illegal base64 data: {exc}") from exc

    def readinto(self, buffer) -> int:
        self._fill()
        size = min(len(buffer), len(self._decoded))
        buffer[:size] = self._decoded[:size]
        self._decoded = self._decoded[size:]
        return size


def transfer_encoding(part: MessagePart) -> str:
    return part.headers.get("Content-Transfer-Encoding").strip().lower()


def open_content(part: MessagePart) -> BinaryIO:
    """Return a reader over the decoded body of ``part``.

    Only base64 is decoded; any other transfer encoding passes through.
    """
    if transfer_encoding(part) == "base64":
        return Base64Reader(part.body)
    return part.body


def copy_content(reader: BinaryIO, writer: BinaryIO, digest=None) -> int:
    """Copy ``reader`` into ``writer`` and return the number of bytes written.

    ``digest`` (a hashlib object) is updated with every chunk when given.
    """
    written = 0
    while True:
        chunk = reader.read(CHUNK_SIZE)
        if not chunk:
            return written
        writer.write(chunk)
        if digest is not None:
            digest.update(chunk)
        written += len(chunk)
