import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from file_store.adapters.storage import StorageBackend, StorageFactory
from file_store.config.settings import Settings, get_settings
from file_store.errors import (
    handle_broad_exceptions,
    handle_http_exceptions,
    handle_request_validation_errors,
)
from file_store.routers.files import router as files_router

# Set up logging
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    storage: StorageBackend | None = None,
) -> FastAPI:
    """Create a FastAPI application.

    Both collaborators are injected: `settings` defaults to the cached
    environment settings and `storage` to the backend those settings name.
    """
    settings = settings or get_settings()
    if storage is None:
        storage = StorageFactory.create(settings)

    app = FastAPI(
        title=settings.app_name,
        summary="Upload, list and delete named files",
        version="v1",
        # docs stay off by default so the only served paths are the file routes
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.enable_docs else None,
        redirect_slashes=False,
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = settings
    app.state.storage = storage

    app.include_router(files_router, tags=["files"])

    app.add_exception_handler(
        exc_class_or_status_code=StarletteHTTPException,
        handler=handle_http_exceptions,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_request_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    logger.info(
        "created %s with %s storage, upload limit %d bytes",
        settings.app_name, settings.storage_backend, settings.max_upload_bytes,
    )
    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)
