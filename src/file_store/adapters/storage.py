"""
Storage backends for the file store.

Every backend exposes the same flat namespace: a file is addressed by its
name alone and every write replaces the whole content. Blocking calls run on
the server's thread pool so a request waiting on storage never stalls others.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from file_store.config.settings import Settings

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

NO_SUCH_FILE = "No such file or directory"


class StorageError(Exception):
    """A storage operation failed; `detail` is safe to show to the client."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


def describe_os_error(error: OSError) -> str:
    """Describe an OSError without leaking the storage path."""
    if error.strerror and error.errno is not None:
        return f"{error.strerror} (os error {error.errno})"
    return str(error)


class StorageBackend(ABC):
    """Flat name -> bytes store used by the handlers."""

    @abstractmethod
    async def list_names(self) -> List[str]:
        """Return the name of every stored entry, in enumeration order."""

    @abstractmethod
    async def read(self, name: str) -> bytes:
        """Return the content stored under `name`; a missing entry is a StorageError."""

    @abstractmethod
    async def write(self, name: str, content: bytes) -> None:
        """Store `content` under `name`, replacing anything already there."""

    @abstractmethod
    async def remove(self, name: str) -> None:
        """Remove `name`; a missing entry is a StorageError."""


class LocalDirectoryStorage(StorageBackend):
    """Stores each file as one regular file inside a single directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info("Storage directory ready at: %s", self.directory)

    def _path(self, name: str) -> Path:
        return self.directory / name

    async def list_names(self) -> List[str]:
        try:
            return await run_in_threadpool(os.listdir, self.directory)
        except OSError as e:
            raise StorageError(describe_os_error(e)) from e

    async def read(self, name: str) -> bytes:
        try:
            return await run_in_threadpool(self._path(name).read_bytes)
        except OSError as e:
            raise StorageError(describe_os_error(e)) from e

    async def write(self, name: str, content: bytes) -> None:
        try:
            await run_in_threadpool(self._path(name).write_bytes, content)
        except OSError as e:
            raise StorageError(describe_os_error(e)) from e

    async def remove(self, name: str) -> None:
        try:
            await run_in_threadpool(self._path(name).unlink)
        except OSError as e:
            raise StorageError(describe_os_error(e)) from e


class InMemoryStorage(StorageBackend):
    """Dict-backed store; nothing survives the process."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, bytes] = dict(files or {})

    async def list_names(self) -> List[str]:
        return list(self.files)

    async def read(self, name: str) -> bytes:
        try:
            return self.files[name]
        except KeyError:
            raise StorageError(NO_SUCH_FILE) from None

    async def write(self, name: str, content: bytes) -> None:
        # pop first so a replaced file moves to the end, as a re-created file would
        self.files.pop(name, None)
        self.files[name] = bytes(content)

    async def remove(self, name: str) -> None:
        if name not in self.files:
            raise StorageError(NO_SUCH_FILE)
        del self.files[name]


class S3Storage(StorageBackend):
    """Stores each file as one object in an S3 bucket, keyed by its name."""

    def __init__(self, bucket_name: str, s3_client: Optional["S3Client"] = None):
        self.bucket_name = bucket_name
        self.s3 = s3_client or boto3.client("s3")

    def _list_keys(self) -> List[str]:
        paginator = self.s3.get_paginator("list_objects_v2")
        keys = []
        for page in paginator.paginate(Bucket=self.bucket_name):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    def _get(self, name: str) -> bytes:
        response = self.s3.get_object(Bucket=self.bucket_name, Key=name)
        return response["Body"].read()

    def _put(self, name: str, content: bytes) -> None:
        self.s3.put_object(
            Bucket=self.bucket_name,
            Key=name,
            Body=content,
            ContentType="application/octet-stream",
        )

    def _delete(self, name: str) -> None:
        # delete_object succeeds on missing keys, so check first
        self.s3.head_object(Bucket=self.bucket_name, Key=name)
        self.s3.delete_object(Bucket=self.bucket_name, Key=name)

    async def _call(self, func, *args):
        try:
            return await run_in_threadpool(func, *args)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("404", "NoSuchKey", "NotFound"):
                raise StorageError(NO_SUCH_FILE) from e
            logger.error(f"S3 error on bucket {self.bucket_name}: {str(e)}")
            raise StorageError(str(e)) from e
        except BotoCoreError as e:
            logger.error(f"S3 client error on bucket {self.bucket_name}: {str(e)}")
            raise StorageError(str(e)) from e

    async def list_names(self) -> List[str]:
        return await self._call(self._list_keys)

    async def read(self, name: str) -> bytes:
        return await self._call(self._get, name)

    async def write(self, name: str, content: bytes) -> None:
        await self._call(self._put, name, content)

    async def remove(self, name: str) -> None:
        await self._call(self._delete, name)


def _local_storage(settings: Settings) -> StorageBackend:
    storage = LocalDirectoryStorage(settings.storage_dir)
    if settings.create_storage_dir:
        storage.ensure_directory()
    return storage


def _memory_storage(settings: Settings) -> StorageBackend:
    return InMemoryStorage()


def _s3_storage(settings: Settings) -> StorageBackend:
    s3_client = boto3.client(
        "s3",
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )
    logger.info(f"Using S3 bucket: {settings.s3_bucket_name}")
    return S3Storage(settings.s3_bucket_name, s3_client)


class StorageFactory:
    """Factory to build the storage backend named by settings.storage_backend"""

    @staticmethod
    def create(settings: Settings) -> StorageBackend:
        builders = {
            "local": _local_storage,
            "memory": _memory_storage,
            "s3": _s3_storage,
        }

        backend = settings.storage_backend
        if backend not in builders:
            raise ValueError(
                f"Invalid storage_backend: {backend}. "
                f"Choose from {list(builders.keys())}"
            )

        logger.info(f"Creating storage backend: {backend}")
        return builders[backend](settings)
