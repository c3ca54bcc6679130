"""Pure helpers: card formatting for books, library rows, reviews and sessions."""

from typing import Optional

from discovery import Book, DiscoverySession
from discovery.models.library import Review, UserBook

from .models import BookCard, PurchaseLinks, ReviewResponse, SessionResponse, UserBookResponse

# Search constants (used by routes/books)
DEFAULT_SEARCH_RESULTS = 15
MAX_SEARCH_RESULTS = 40
DEFAULT_SIMILAR_RESULTS = 6


def to_book_card(book: Book, with_purchase_links: bool = False) -> BookCard:
    """Convert a Book to the card shown by the client."""
    links = PurchaseLinks(**book.purchase_links()) if with_purchase_links else None
    return BookCard(
        id=book.id,
        title=book.title,
        authors=list(book.authors),
        author_display=book.author_display,
        description=book.description,
        hook=book.hook,
        categories=list(book.categories),
        genre_display=book.genre_display,
        average_rating=book.average_rating,
        rating_display=book.rating_display,
        page_count=book.page_count,
        page_count_display=book.page_count_display,
        published_date=book.published_date,
        thumbnail_url=book.thumbnail_url,
        cover_url=book.high_quality_image_url,
        info_link=book.info_link,
        purchase_links=links,
    )


def to_user_book_response(user_book: UserBook) -> UserBookResponse:
    return UserBookResponse(
        id=user_book.id,
        google_books_id=user_book.google_books_id,
        status=user_book.status,
        status_display=user_book.status.display_name,
        added_at=user_book.added_at,
        updated_at=user_book.updated_at,
        book=to_book_card(user_book.book) if user_book.book else None,
    )


def to_review_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        google_books_id=review.google_books_id,
        rating=review.rating,
        review_text=review.review_text,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def to_session_response(session: DiscoverySession) -> SessionResponse:
    current: Optional[BookCard] = None
    if session.current is not None:
        current = to_book_card(session.current, with_purchase_links=session.show_purchase_sheet)
    return SessionResponse(
        session_id=session.session_id,
        current=current,
        queued_count=len(session.queue),
        seen_count=len(session.seen),
        history_count=len(session.history),
        show_purchase_sheet=session.show_purchase_sheet,
        using_fallback=session.using_fallback,
        refilling=session.queue.refilling,
    )


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
