"""Item routes.

Each route fails in a different way so the error mapping can be observed end
to end: body validation, malformed JSON, a missing query parameter, a missing
multipart part, an application not-found error, an unclassified server error
and a plain ``HTTPException``.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Header, HTTPException, Path, Query, UploadFile, status

from rest_errors.errors import ApiError
from rest_errors.repositories.memory import InMemoryStore, ItemRecord
from rest_errors.routes.dependencies import get_store
from rest_errors.schemas.error import ErrorResponse
from rest_errors.schemas.item import CreateItemRequest, Item, ItemAttachment

router = APIRouter(prefix="/items", tags=["Items"])


def _to_item(record: ItemRecord) -> Item:
    return Item(id=record.id, name=record.name, quantity=record.quantity, created_at=record.created_at)


def _require_item(store: InMemoryStore, item_id: str) -> ItemRecord:
    record = store.get_item(item_id)
    if record is None:
        raise ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")
    return record


@router.post(
    "",
    response_model=Item,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_item(
    payload: CreateItemRequest,
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> Item:
    return _to_item(store.create_item(name=payload.name, quantity=payload.quantity))


@router.get(
    "",
    response_model=list[Item],
    responses={400: {"model": ErrorResponse}},
)
async def list_items(
    limit: Annotated[int, Query(ge=1, le=100)],
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> list[Item]:
    return [_to_item(record) for record in store.list_items(limit)]


@router.get(
    "/{itemId}",
    response_model=Item,
    responses={404: {"model": ErrorResponse}},
)
async def get_item(
    item_id: Annotated[str, Path(alias="itemId")],
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> Item:
    return _to_item(_require_item(store, item_id))


@router.post(
    "/{itemId}/attachments",
    response_model=ItemAttachment,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def upload_attachment(
    item_id: Annotated[str, Path(alias="itemId")],
    file: Annotated[UploadFile, File()],
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> ItemAttachment:
    record = _require_item(store, item_id)
    content = await file.read()
    filename = file.filename or "file"
    store.add_attachment(record, filename)
    return ItemAttachment(item_id=record.id, filename=filename, size=len(content))


@router.get(
    "/{itemId}/report",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_item_report(
    item_id: Annotated[str, Path(alias="itemId")],
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> dict:
    _require_item(store, item_id)
    raise RuntimeError("report backend unavailable")


@router.delete(
    "/{itemId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"description": "Caller is not an admin"}, 404: {"model": ErrorResponse}},
)
async def delete_item(
    item_id: Annotated[str, Path(alias="itemId")],
    store: Annotated[InMemoryStore, Depends(get_store)],
    x_role: Annotated[str | None, Header()] = None,
) -> None:
    if x_role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    _require_item(store, item_id)
    store.delete_item(item_id)
