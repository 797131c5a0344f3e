"""Header block parsing (RFC 5322) and structured header values (RFC 2045/2183/2231)."""

from __future__ import annotations

import io
import logging
import re
from typing import Iterable, Iterator

from .charsets import DEFAULT_REGISTRY, CharsetRegistry
from .errors import HeaderParseError, UnsupportedCharsetError
from .models import ContentDisposition, MediaType, MessagePart

logger = logging.getLogger(__name__)

_BLANK_LINE = re.compile(rb"\r?\n\r?\n")
_FIELD_NAME = re.compile(r"[!-9;-~]+")
_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_TSPECIALS = frozenset('()<>@,;:\\"/[]?=')


class HeaderMap:
    """Ordered header fields with case-insensitive lookup.

    Every occurrence of a field is kept; :meth:`get` returns the first one.
    """

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        self._items: list[tuple[str, str]] = []
        self._index: dict[str, list[str]] = {}
        for name, value in items:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        self._items.append((name, value))
        self._index.setdefault(name.lower(), []).append(value)

    def get(self, name: str, default: str = "") -> str:
        values = self._index.get(name.lower())
        return values[0] if values else default

    def get_all(self, name: str) -> list[str]:
        return list(self._index.get(name.lower(), []))

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._items:
            if name.lower() not in seen:
                seen.add(name.lower())
                yield name

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"HeaderMap({self._items!r})"


def split_message(data: bytes) -> tuple[bytes, bytes]:
    """Split raw bytes at the first blank line into (header block, body)."""
    if data.startswith(b"\r\n"):
        return b"", data[2:]
    if data.startswith(b"\n"):
        return b"", data[1:]
    match = _BLANK_LINE.search(data)
    if match is None:
        return data, b""
    return data[: match.start()], data[match.end():]


def _decode_line(line: bytes) -> str:
    try:
        return line.decode("utf-8")
    except UnicodeDecodeError:
        return line.decode("latin-1")


def parse_header_block(block: bytes, strict: bool = True) -> HeaderMap:
    """Parse a header block into a :class:`HeaderMap`, unfolding continuation lines.

    Malformed lines raise :class:`HeaderParseError` in strict mode and are
    skipped otherwise.
    """
    fields: list[list[str]] = []
    for number, raw_line in enumerate(block.splitlines(), start=1):
        line = _decode_line(raw_line)
        if not line.strip():
            continue
        if line[0] in " \t":
            if not fields:
                if strict:
                    raise HeaderParseError(f"continuation line {number} before any header field")
                continue
            continuation = line.strip()
            if continuation:
                fields[-1][1] = f"{fields[-1][1]} {continuation}"
            continue

        name, sep, value = line.partition(":")
        name = name.rstrip()
        if not sep or not _FIELD_NAME.fullmatch(name):
            if strict:
                raise HeaderParseError(f"malformed header line {number}: {line[:80]!r}")
            logger.debug("Skipping malformed header line %s: %r", number, line[:80])
            continue
        fields.append([name, value.strip()])

    return HeaderMap((name, value) for name, value in fields)


def parse_entity(data: bytes) -> MessagePart:
    """Parse a message or sub-part: its own header block plus the body after it."""
    block, body = split_message(data)
    return MessagePart(headers=parse_header_block(block), body=io.BytesIO(body))


def _is_token_char(char: str) -> bool:
    return " " < char < "\x7f" and char not in _TSPECIALS


def _consume_token(text: str) -> tuple[str, str]:
    end = 0
    while end < len(text) and _is_token_char(text[end]):
        end += 1
    return text[:end], text[end:]


def _consume_quoted(text: str) -> tuple[str, str]:
    chars: list[str] = []
    position = 1
    while position < len(text):
        char = text[position]
        if char == '"':
            return "".join(chars), text[position + 1:]
        if char == "\\" and position + 1 < len(text):
            following = text[position + 1]
            # Unnecessary escapes come from clients sending raw Windows paths.
            if following in _TSPECIALS:
                chars.append(following)
                position += 2
                continue
        chars.append(char)
        position += 1
    raise HeaderParseError("unterminated quoted parameter value")


def _consume_parameter(text: str) -> tuple[str, str, str]:
    key, rest = _consume_token(text.lstrip())
    if not key:
        raise HeaderParseError(f"invalid media parameter near {text.strip()[:40]!r}")
    rest = rest.lstrip()
    if not rest.startswith("="):
        raise HeaderParseError(f"media parameter {key!r} has no value")
    rest = rest[1:].lstrip()
    if rest.startswith('"'):
        value, rest = _consume_quoted(rest)
    else:
        value, rest = _consume_token(rest)
        if not value:
            raise HeaderParseError(f"media parameter {key!r} has an empty value")
    return key.lower(), value, rest


def _decode_extended(value: str, registry: CharsetRegistry, charset_label: str | None = None) -> str | None:
    """Decode an RFC 2231 ``charset'language'percent-encoded`` value."""
    if charset_label is None:
        parts = value.split("'", 2)
        if len(parts) != 3:
            return None
        charset_label, _, value = parts
    if _PERCENT_ESCAPE.search(value):
        return None
    raw = re.sub(r"%([0-9A-Fa-f]{2})", lambda m: chr(int(m.group(1), 16)), value)
    try:
        return registry.lookup(charset_label or "us-ascii").decode(raw.encode("latin-1"))
    except (UnsupportedCharsetError, UnicodeError):
        return None


def _merge_extended(
    simple: dict[str, str], extended: dict[str, str], registry: CharsetRegistry
) -> dict[str, str]:
    params = dict(simple)
    bases = {key.split("*", 1)[0] for key in extended}
    for base in sorted(bases):
        if f"{base}*" in extended:
            decoded = _decode_extended(extended[f"{base}*"], registry)
            if decoded is not None:
                params[base] = decoded
            continue

        pieces: list[str] = []
        charset_label: str | None = None
        index = 0
        while True:
            plain_key, encoded_key = f"{base}*{index}", f"{base}*{index}*"
            if plain_key in extended:
                pieces.append(extended[plain_key])
            elif encoded_key in extended:
                encoded = extended[encoded_key]
                if index == 0:
                    parts = encoded.split("'", 2)
                    if len(parts) != 3:
                        pieces = []
                        break
                    charset_label, encoded = parts[0], parts[2]
                decoded = _decode_extended(encoded, registry, charset_label or "us-ascii")
                if decoded is None:
                    pieces = []
                    break
                pieces.append(decoded)
            else:
                break
            index += 1
        if pieces:
            params[base] = "".join(pieces)
    return params


def _parse_structured(value: str, registry: CharsetRegistry) -> tuple[str, dict[str, str]]:
    primary, _, rest = value.partition(";")
    primary = primary.strip().lower()
    if not primary:
        raise HeaderParseError("no media type")
    major, slash, minor = primary.partition("/")
    if not major or _consume_token(major)[0] != major:
        raise HeaderParseError(f"expected token in {primary!r}")
    if slash and (not minor or _consume_token(minor)[0] != minor):
        raise HeaderParseError(f"expected token after slash in {primary!r}")

    simple: dict[str, str] = {}
    extended: dict[str, str] = {}
    while rest.strip():
        key, param_value, rest = _consume_parameter(rest)
        target = extended if "*" in key else simple
        if key in target:
            raise HeaderParseError(f"duplicate parameter name {key!r}")
        target[key] = param_value
        rest = rest.lstrip()
        if rest:
            if not rest.startswith(";"):
                raise HeaderParseError(f"unexpected text {rest[:40]!r} after parameter {key!r}")
            rest = rest[1:]

    params = _merge_extended(simple, extended, registry) if extended else simple
    return primary, params


def parse_media_type(value: str, registry: CharsetRegistry = DEFAULT_REGISTRY) -> MediaType:
    """Parse a Content-Type value such as ``application/pdf; name="a.pdf"``."""
    primary, params = _parse_structured(value or "", registry)
    major, _, minor = primary.partition("/")
    return MediaType(type=major, subtype=minor, parameters=params)


def parse_disposition(value: str, registry: CharsetRegistry = DEFAULT_REGISTRY) -> ContentDisposition:
    """Parse a Content-Disposition value such as ``attachment; filename=a.pdf``."""
    primary, params = _parse_structured(value or "", registry)
    return ContentDisposition(disposition=primary, parameters=params)
