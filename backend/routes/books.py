"""Catalog endpoints: keyword search, book details, similar books."""

from fastapi import APIRouter, HTTPException, Query

from ..dependencies import upstream_error
from ..services import GoogleBooksError
from ..state import get_state
from ..utils import (
    DEFAULT_SEARCH_RESULTS,
    DEFAULT_SIMILAR_RESULTS,
    MAX_SEARCH_RESULTS,
    to_book_card,
)

router = APIRouter()


@router.get("/search")
def search_books(
    q: str = Query(default=""),
    start_index: int = Query(default=0, ge=0),
    limit: int = Query(default=DEFAULT_SEARCH_RESULTS, ge=1, le=MAX_SEARCH_RESULTS),
):
    """Search by title, author or subject. Empty queries are rejected."""
    query = q.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Search query cannot be empty")
    try:
        books = get_state().books_client.search_books(query, start_index=start_index, max_results=limit)
    except GoogleBooksError as e:
        raise upstream_error(e)
    return {
        "query": query,
        "start_index": start_index,
        "count": len(books),
        "books": [to_book_card(b) for b in books],
    }


@router.get("/{book_id}")
def get_book(book_id: str):
    """Book details, with purchase links."""
    try:
        book = get_state().books_client.fetch_book_details(book_id)
    except GoogleBooksError as e:
        raise upstream_error(e)
    return to_book_card(book, with_purchase_links=True)


@router.get("/{book_id}/similar")
def get_similar_books(
    book_id: str,
    limit: int = Query(default=DEFAULT_SIMILAR_RESULTS, ge=1, le=MAX_SEARCH_RESULTS - 1),
):
    """Books sharing the first genre (or the first author when the book has none)."""
    client = get_state().books_client
    try:
        book = client.fetch_book_details(book_id)
        similar = client.fetch_similar_books(book, max_results=limit)
    except GoogleBooksError as e:
        raise upstream_error(e)
    return {
        "book_id": book_id,
        "count": len(similar),
        "books": [to_book_card(b) for b in similar],
    }
