"""Review endpoints: one review per user and book."""

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_store, upstream_error
from ..models import ReviewRequest, ReviewResponse
from ..services import DataStore, DataStoreError
from ..utils import to_review_response

router = APIRouter()


@router.get("/users/{user_id}/reviews")
def list_reviews(user_id: str, store: DataStore = Depends(get_store)):
    try:
        reviews = store.fetch_user_reviews(user_id)
    except DataStoreError as e:
        raise upstream_error(e)
    return {"user_id": user_id, "count": len(reviews), "reviews": [to_review_response(r) for r in reviews]}


@router.get("/users/{user_id}/reviews/{google_books_id}", response_model=ReviewResponse)
def get_review(user_id: str, google_books_id: str, store: DataStore = Depends(get_store)):
    try:
        review = store.fetch_review(user_id, google_books_id)
    except DataStoreError as e:
        raise upstream_error(e)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return to_review_response(review)


@router.put("/users/{user_id}/reviews/{google_books_id}", response_model=ReviewResponse)
def save_review(
    user_id: str,
    google_books_id: str,
    request: ReviewRequest,
    store: DataStore = Depends(get_store),
):
    """Create or replace the user's review of a book. Rating is 1 to 5 stars."""
    text = (request.review_text or "").strip() or None
    try:
        review = store.upsert_review(user_id, google_books_id, request.rating, text)
    except DataStoreError as e:
        raise upstream_error(e)
    return to_review_response(review)


@router.delete("/reviews/{review_id}")
def delete_review(review_id: str, store: DataStore = Depends(get_store)):
    try:
        store.delete_review(review_id)
    except DataStoreError as e:
        raise upstream_error(e)
    return {"status": "ok", "id": review_id}
