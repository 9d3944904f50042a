"""Helpers for building upload requests in tests."""
from typing import Iterator, List, Optional, Tuple

BOUNDARY = "file-store-test-boundary"
MULTIPART_CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"

# (part name, filename or None for a plain field, content)
Part = Tuple[str, Optional[str], bytes]


def multipart_body(parts: List[Part]) -> bytes:
    """Encode parts as a multipart/form-data body using BOUNDARY."""
    chunks = []
    for name, filename, content in parts:
        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        chunks.append(f"--{BOUNDARY}\r\n".encode())
        chunks.append(f"Content-Disposition: {disposition}\r\n".encode())
        if filename is not None:
            chunks.append(b"Content-Type: application/octet-stream\r\n")
        chunks.append(b"\r\n")
        chunks.append(content)
        chunks.append(b"\r\n")
    chunks.append(f"--{BOUNDARY}--\r\n".encode())
    return b"".join(chunks)


def upload(client, name: str, content: bytes, part_name: str = "file"):
    """POST `content` as a file part named `part_name`."""
    return client.post(
        f"/files/v1/{name}",
        files={part_name: (name, content, "text/plain")},
    )


def chunked(body: bytes, chunk_size: int = 256) -> Iterator[bytes]:
    """Yield `body` in pieces so the request is sent without a Content-Length."""
    for start in range(0, len(body), chunk_size):
        yield body[start:start + chunk_size]
