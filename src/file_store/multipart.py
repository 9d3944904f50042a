"""
Streaming multipart parsing that keeps part content as raw bytes.

Starlette's form parser decodes parts without a filename into text, which
cannot be turned back into the bytes the client sent. Here the body is fed
to python-multipart directly and only the parts with the wanted name are
kept, byte for byte, whether or not they carry a filename.
"""

import logging
from typing import AsyncIterator, Dict, List, Optional

from python_multipart.exceptions import FormParserError
from python_multipart.multipart import MultipartParser, parse_options_header

logger = logging.getLogger(__name__)


class MultipartError(ValueError):
    """The body is not a well-formed multipart/form-data payload."""


class NamedPartCollector:
    """python-multipart callbacks buffering every part named `wanted_name`."""

    def __init__(self, wanted_name: str):
        self.wanted_name = wanted_name.encode("utf-8")
        self.parts: List[bytes] = []
        self._headers: Dict[bytes, bytes] = {}
        self._header_field = bytearray()
        self._header_value = bytearray()
        self._buffer: Optional[bytearray] = None

    def on_part_begin(self) -> None:
        self._headers = {}
        self._buffer = None

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field.extend(data[start:end])

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value.extend(data[start:end])

    def on_header_end(self) -> None:
        self._headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field.clear()
        self._header_value.clear()

    def on_headers_finished(self) -> None:
        _, options = parse_options_header(self._headers.get(b"content-disposition"))
        if options.get(b"name") == self.wanted_name:
            self._buffer = bytearray()

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._buffer is not None:
            self._buffer.extend(data[start:end])

    def on_part_end(self) -> None:
        if self._buffer is not None:
            self.parts.append(bytes(self._buffer))
            self._buffer = None

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
        }


async def collect_named_parts(
    content_type: str,
    stream: AsyncIterator[bytes],
    part_name: str,
) -> List[bytes]:
    """Return the raw content of every part named `part_name`, in body order.

    Raises:
        MultipartError: the boundary is missing or the body does not parse.
    """
    _, params = parse_options_header(content_type)
    boundary = params.get(b"boundary")
    if not boundary:
        raise MultipartError("Missing boundary in multipart.")

    collector = NamedPartCollector(part_name)
    try:
        parser = MultipartParser(boundary, collector.callbacks())
        async for chunk in stream:
            if chunk:
                parser.write(chunk)
        parser.finalize()
    except FormParserError as e:
        logger.error("multipart parse error: %s", e)
        raise MultipartError(str(e)) from e
    return collector.parts
