"""RFC 2047 encoded-word decoding for attachment filenames."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import NamedTuple

from .charsets import DEFAULT_REGISTRY, CharsetRegistry
from .errors import EncodedWordError, UnsupportedCharsetError

logger = logging.getLogger(__name__)

_ENCODED_WORD = re.compile(r"=\?([^?\s]+)\?([bBqQ])\?([^?\s]*)\?=")
_Q_ESCAPE = re.compile(rb"=([0-9A-Fa-f]{2})")


class DecodedFilename(NamedTuple):
    text: str
    error: str | None = None


def _decode_q(text: str) -> bytes:
    raw = text.replace("_", " ").encode("ascii")
    if re.search(rb"=(?![0-9A-Fa-f]{2})", raw):
        raise EncodedWordError(f"invalid quoted-printable escape in {text!r}")
    return _Q_ESCAPE.sub(lambda m: bytes([int(m.group(1), 16)]), raw)


def _decode_payload(encoding: str, text: str) -> bytes:
    if encoding in "bB":
        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise EncodedWordError(f"invalid base64 payload {text!r}: {exc}") from exc
    try:
        return _decode_q(text)
    except UnicodeEncodeError as exc:
        raise EncodedWordError(f"non-ASCII character in encoded-word {text!r}") from exc


def _decode_word(charset_label: str, encoding: str, text: str, registry: CharsetRegistry) -> str:
    # RFC 2231 allows a language tag after the charset: =?utf-8*en?Q?...?=
    label = charset_label.split("*", 1)[0]
    payload = _decode_payload(encoding, text)
    try:
        charset = registry.lookup(label)
    except UnsupportedCharsetError as exc:
        raise EncodedWordError(str(exc)) from exc
    try:
        return charset.decode(payload)
    except UnicodeError as exc:
        raise EncodedWordError(f"invalid {charset.name} bytes in encoded-word: {exc}") from exc


def decode_encoded_words(value: str, registry: CharsetRegistry = DEFAULT_REGISTRY) -> str:
    """Decode every encoded-word in ``value``.

    Whitespace between two adjacent encoded-words is dropped, text outside
    encoded-words is kept as is. Raises :class:`EncodedWordError` when a word
    names an unknown charset or carries an undecodable payload.
    """
    pieces: list[str] = []
    position = 0
    after_word = False
    for match in _ENCODED_WORD.finditer(value):
        between = value[position:match.start()]
        if not (after_word and (between == "" or between.isspace())):
            pieces.append(between)
        pieces.append(_decode_word(match.group(1), match.group(2), match.group(3), registry))
        after_word = True
        position = match.end()
    pieces.append(value[position:])
    return "".join(pieces)


def decode_filename(value: str, registry: CharsetRegistry = DEFAULT_REGISTRY) -> DecodedFilename:
    """Decode ``value`` without raising.

    On failure the original string comes back unchanged together with the
    reason, which callers report as a warning.
    """
    try:
        return DecodedFilename(decode_encoded_words(value, registry))
    except EncodedWordError as exc:
        logger.debug("Keeping undecoded filename %r: %s", value, exc)
        return DecodedFilename(value, str(exc))
