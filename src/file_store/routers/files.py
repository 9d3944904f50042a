from fastapi import APIRouter, Depends, Path, Query, Request
from fastapi.responses import PlainTextResponse, Response

from file_store import handlers
from file_store.adapters.storage import StorageBackend
from file_store.config.settings import Settings
from file_store.dependencies import get_app_settings, get_storage
from file_store.errors import failure_response
from file_store.schemas import GetFilesResponse, ListingFormat

router = APIRouter(prefix="/files/v1")


@router.post("/{name}", response_class=PlainTextResponse)
async def upload_file(
    request: Request,
    name: str = Path(..., description="Name to store the file under"),
    settings: Settings = Depends(get_app_settings),
    storage: StorageBackend = Depends(get_storage),
) -> Response:
    """
    Upload a file.

    The body must be `multipart/form-data` and at most `max_upload_bytes`
    long; the content of the part named `file` replaces whatever is stored
    under `name`. Other parts are ignored.
    """
    parsed = await handlers.parse_upload_form(request, max_body_size=settings.max_upload_bytes)
    if not parsed.ok:
        return failure_response(parsed.failure)

    outcome = await handlers.upload_file(storage, name, parsed.value)
    if not outcome.ok:
        return failure_response(outcome.failure)
    return PlainTextResponse(outcome.value)


@router.get("", response_model=GetFilesResponse)
async def list_files(
    listing_format: ListingFormat = Query(
        ListingFormat.TEXT,
        alias="format",
        description="`text` for the bracketed listing, `json` for a JSON body",
    ),
    storage: StorageBackend = Depends(get_storage),
):
    """
    List the names of all stored files.

    Names come back in the order storage enumerates them, which is not sorted.
    """
    outcome = await handlers.list_files(storage)
    if not outcome.ok:
        return failure_response(outcome.failure)

    if listing_format is ListingFormat.JSON:
        return GetFilesResponse(files=outcome.value)
    return PlainTextResponse(handlers.format_listing(outcome.value))


@router.delete("/{name}", response_class=PlainTextResponse)
async def delete_file(
    name: str = Path(..., description="Name of the file to delete"),
    storage: StorageBackend = Depends(get_storage),
) -> Response:
    """Delete a stored file."""
    outcome = await handlers.delete_file(storage, name)
    if not outcome.ok:
        return failure_response(outcome.failure)
    return PlainTextResponse(outcome.value)
