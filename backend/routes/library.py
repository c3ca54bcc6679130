"""User library (reading shelves) endpoints."""

import logging

from fastapi import APIRouter, Depends

from discovery.models.library import BookStatus

from ..dependencies import get_store, upstream_error
from ..models import AddUserBookRequest, LibraryResponse, UpdateStatusRequest, UserBookResponse
from ..services import DataStore, DataStoreError, GoogleBooksError
from ..state import get_state
from ..utils import to_user_book_response

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users/{user_id}/library", response_model=LibraryResponse)
def get_library(user_id: str, store: DataStore = Depends(get_store)):
    """
    The user's saved books grouped by shelf, newest first.

    Rows are enriched with book details from the catalog; a row whose
    details can't be fetched is still returned, without a card.
    """
    try:
        rows = store.fetch_user_books(user_id)
    except DataStoreError as e:
        raise upstream_error(e)
    client = get_state().books_client
    shelves = {status: [] for status in BookStatus}
    for row in rows:
        try:
            row = row.model_copy(update={"book": client.fetch_book_details(row.google_books_id)})
        except GoogleBooksError as e:
            logger.debug("[library] no details for %s: %s", row.google_books_id, e)
        shelves[row.status].append(to_user_book_response(row))
    return LibraryResponse(
        want_to_read=shelves[BookStatus.WANT_TO_READ],
        reading=shelves[BookStatus.READING],
        read=shelves[BookStatus.READ],
    )


@router.post("/users/{user_id}/library", response_model=UserBookResponse, status_code=201)
def add_to_library(user_id: str, request: AddUserBookRequest, store: DataStore = Depends(get_store)):
    try:
        row = store.add_user_book(user_id, request.google_books_id, request.status)
    except DataStoreError as e:
        raise upstream_error(e)
    return to_user_book_response(row)


@router.patch("/library/{user_book_id}")
def update_status(user_book_id: str, request: UpdateStatusRequest, store: DataStore = Depends(get_store)):
    """Move a saved book to another shelf."""
    try:
        store.update_book_status(user_book_id, request.status)
    except DataStoreError as e:
        raise upstream_error(e)
    return {"status": "ok", "id": user_book_id, "book_status": request.status.value}


@router.delete("/library/{user_book_id}")
def remove_from_library(user_book_id: str, store: DataStore = Depends(get_store)):
    try:
        store.delete_user_book(user_book_id)
    except DataStoreError as e:
        raise upstream_error(e)
    return {"status": "ok", "id": user_book_id}
