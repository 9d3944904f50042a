"""
Upload, list and delete handlers.

Each handler performs a single storage operation and returns an `Outcome`.
Expected failures (bad names, unreadable bodies, storage errors) come back
as tagged failures; anything else is left to propagate.
"""

import logging
from typing import AsyncIterator, List, Optional

from fastapi import Request

from file_store.adapters.storage import StorageBackend, StorageError
from file_store.errors import PayloadTooLargeError
from file_store.multipart import MultipartError, collect_named_parts
from file_store.schemas import Failure, FailureKind, Outcome
from file_store.utils.decorators import log_outcome

logger = logging.getLogger(__name__)

FILE_PART_NAME = "file"
RESERVED_NAMES = {".", ".."}
FORBIDDEN_NAME_CHARS = ("/", "\\", "\x00")


def check_file_name(name: str) -> Optional[Failure]:
    """Return a failure if `name` cannot be used as a single storage key."""
    if not name:
        reason = "name is empty"
    elif name in RESERVED_NAMES:
        reason = "name is reserved"
    elif any(char in name for char in FORBIDDEN_NAME_CHARS):
        reason = "name must be a single path segment"
    else:
        return None
    return Failure(kind=FailureKind.STORAGE, detail=f"invalid file name: {name!r} ({reason})")


def declared_length(request: Request) -> Optional[int]:
    try:
        return int(request.headers["content-length"])
    except (KeyError, ValueError):
        return None


async def limited_stream(stream: AsyncIterator[bytes], max_body_size: int) -> AsyncIterator[bytes]:
    """Pass chunks through, raising PayloadTooLargeError once the total passes the limit."""
    received = 0
    async for chunk in stream:
        received += len(chunk)
        if received > max_body_size:
            raise PayloadTooLargeError(max_body_size)
        yield chunk


async def parse_upload_form(request: Request, max_body_size: int) -> Outcome:
    """
    Read a multipart upload body and return the raw content of its `file` parts.

    The size limit is checked first: a declared Content-Length over the limit
    is refused without reading, and a body without one is counted as it
    streams in.
    """
    declared = declared_length(request)
    if declared is not None and declared > max_body_size:
        return Outcome.fail(FailureKind.PAYLOAD_TOO_LARGE, f"content-length {declared}")

    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        return Outcome.fail(FailureKind.STORAGE, "expected a multipart/form-data body")

    try:
        parts = await collect_named_parts(
            content_type,
            limited_stream(request.stream(), max_body_size),
            FILE_PART_NAME,
        )
    except PayloadTooLargeError as e:
        return Outcome.fail(FailureKind.PAYLOAD_TOO_LARGE, str(e))
    except MultipartError as e:
        return Outcome.fail(FailureKind.STORAGE, str(e))
    return Outcome.success(parts)


@log_outcome
async def upload_file(storage: StorageBackend, name: str, parts: List[bytes]) -> Outcome:
    """
    Store the content of every `file` part under `name`.

    Parts are written in order, so with several `file` parts the last one
    wins. An upload without any `file` part writes nothing and still succeeds.
    """
    failure = check_file_name(name)
    if failure:
        return Outcome(failure=failure)

    for content in parts:
        try:
            await storage.write(name, content)
        except StorageError as e:
            logger.error("error writing file %s: %s", name, e.detail)
            return Outcome.fail(FailureKind.STORAGE, e.detail)
        logger.info("created file: %s (%d bytes)", name, len(content))

    return Outcome.success("success")


@log_outcome
async def list_files(storage: StorageBackend) -> Outcome:
    try:
        names = await storage.list_names()
    except StorageError as e:
        logger.error("error listing files: %s", e.detail)
        return Outcome.fail(FailureKind.STORAGE, e.detail)
    return Outcome.success(names)


@log_outcome
async def delete_file(storage: StorageBackend, name: str) -> Outcome:
    failure = check_file_name(name)
    if failure:
        return Outcome(failure=failure)

    try:
        await storage.remove(name)
    except StorageError as e:
        logger.error("error removing file %s: %s", name, e.detail)
        return Outcome.fail(FailureKind.STORAGE, e.detail)
    logger.info("removed file: %s", name)
    return Outcome.success(f"{name} deleted")


def format_listing(names) -> str:
    """Render names as a bracketed list, one quoted name per line."""
    if not names:
        return "[]"
    lines = ["["]
    lines.extend(f"    {_quote(name)}," for name in names)
    lines.append("]")
    return "\n".join(lines)


def _quote(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{escaped}"'
