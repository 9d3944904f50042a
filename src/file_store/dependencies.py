from fastapi import Request

from file_store.adapters.storage import StorageBackend
from file_store.config.settings import Settings


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_storage(request: Request) -> StorageBackend:
    """Storage backend the app was created with."""
    return request.app.state.storage
