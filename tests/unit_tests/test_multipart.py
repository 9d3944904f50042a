import pytest

from file_store.multipart import MultipartError, collect_named_parts
from tests.fixtures.uploads import MULTIPART_CONTENT_TYPE, multipart_body

NON_UTF8 = b"\xff\xfe\x00\x80"


async def stream_of(body: bytes, chunk_size: int = 7):
    for start in range(0, len(body), chunk_size):
        yield body[start:start + chunk_size]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.mark.anyio
async def test_plain_field_keeps_raw_bytes():
    body = multipart_body([("file", None, NON_UTF8)])

    parts = await collect_named_parts(MULTIPART_CONTENT_TYPE, stream_of(body), "file")

    assert parts == [NON_UTF8]


@pytest.mark.anyio
async def test_file_part_keeps_raw_bytes():
    content = bytes(range(256)) * 4
    body = multipart_body([("file", "blob.bin", content)])

    parts = await collect_named_parts(MULTIPART_CONTENT_TYPE, stream_of(body), "file")

    assert parts == [content]


@pytest.mark.anyio
async def test_other_part_names_are_skipped():
    body = multipart_body([
        ("attachment", "other.bin", b"ignored"),
        ("file", None, b"kept"),
        ("note", None, b"hi"),
    ])

    parts = await collect_named_parts(MULTIPART_CONTENT_TYPE, stream_of(body), "file")

    assert parts == [b"kept"]


@pytest.mark.anyio
async def test_parts_come_back_in_body_order():
    body = multipart_body([("file", "a.bin", b"first"), ("file", None, b"second")])

    parts = await collect_named_parts(MULTIPART_CONTENT_TYPE, stream_of(body, chunk_size=1), "file")

    assert parts == [b"first", b"second"]


@pytest.mark.anyio
async def test_empty_part_is_kept():
    body = multipart_body([("file", "empty.txt", b"")])

    parts = await collect_named_parts(MULTIPART_CONTENT_TYPE, stream_of(body), "file")

    assert parts == [b""]


@pytest.mark.anyio
async def test_missing_boundary():
    body = multipart_body([("file", None, b"x")])

    with pytest.raises(MultipartError, match="boundary"):
        await collect_named_parts("multipart/form-data", stream_of(body), "file")
