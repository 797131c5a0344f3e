"""Split multipart bodies into their sub-parts."""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from .charsets import DEFAULT_REGISTRY, CharsetRegistry
from .errors import HeaderParseError, MissingBoundaryError
from .headers import parse_entity, parse_media_type
from .models import MediaType, MessagePart

logger = logging.getLogger(__name__)

WarnCallback = Callable[[str, str], None]


def _strip_line_break(segment: bytes) -> bytes:
    if segment.endswith(b"\r\n"):
        return segment[:-2]
    if segment.endswith((b"\n", b"\r")):
        return segment[:-1]
    return segment


def split_multipart(body: bytes, boundary: str) -> tuple[list[bytes], bool]:
    """Return the interior segments of a multipart body and whether it was truncated.

    Preamble and epilogue are dropped. The line break in front of a delimiter
    line belongs to the delimiter, not to the segment. ``truncated`` is true
    when the closing ``--boundary--`` line never appears.
    """
    delimiter = b"--" + boundary.encode("utf-8")
    closing = delimiter + b"--"
    segments: list[bytes] = []
    current: list[bytes] | None = None

    for line in body.splitlines(keepends=True):
        marker = line.rstrip(b" \t\r\n")
        if marker == delimiter or marker == closing:
            if current is not None:
                segments.append(_strip_line_break(b"".join(current)))
            if marker == closing:
                return segments, False
            current = []
        elif current is not None:
            current.append(line)

    if current is not None:
        segments.append(_strip_line_break(b"".join(current)))
    return segments, True


class MimeWalker:
    """Yield the candidate parts of a message.

    Only the top level of a multipart message is walked unless ``recursive``
    is set, in which case nested multipart parts are descended into as well.
    """

    def __init__(
        self,
        warn: WarnCallback,
        recursive: bool = False,
        registry: CharsetRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self.warn = warn
        self.recursive = recursive
        self.registry = registry

    def walk(self, part: MessagePart, media_type: MediaType) -> Iterator[MessagePart]:
        """Yield ``part`` itself, or its sub-parts when it is multipart.

        Raises :class:`MissingBoundaryError` when a top-level multipart
        declares no boundary.
        """
        if not media_type.is_multipart:
            yield part
            return
        yield from self._walk_multipart(part, media_type, prefix="")

    def _walk_multipart(self, part: MessagePart, media_type: MediaType, prefix: str) -> Iterator[MessagePart]:
        boundary = media_type.parameters.get("boundary", "")
        if not boundary:
            raise MissingBoundaryError(f"{media_type.essence} message without boundary")

        segments, truncated = split_multipart(part.body.read(), boundary)
        logger.debug("Found %d part(s) under boundary %r", len(segments), boundary)
        if truncated:
            self.warn(part.label, f"multipart body has no closing delimiter for boundary {boundary!r}")

        for number, segment in enumerate(segments, start=1):
            label = f"{prefix}{number}"
            try:
                sub_part = parse_entity(segment)
            except HeaderParseError as exc:
                self.warn(label, f"could not parse part headers: {exc}")
                continue
            sub_part.label = label

            nested = self._nested_media_type(sub_part) if self.recursive else None
            if nested is not None and nested.is_multipart:
                try:
                    yield from self._walk_multipart(sub_part, nested, prefix=f"{label}.")
                except MissingBoundaryError as exc:
                    self.warn(label, str(exc))
                continue
            yield sub_part

    def _nested_media_type(self, part: MessagePart) -> MediaType | None:
        value = part.headers.get("Content-Type")
        if not value:
            return None
        try:
            return parse_media_type(value, self.registry)
        except HeaderParseError:
            return None
