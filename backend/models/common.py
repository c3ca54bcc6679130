"""Common Pydantic models shared across routes."""

from typing import List, Optional

from pydantic import BaseModel


class PurchaseLinks(BaseModel):
    amazon: Optional[str] = None
    apple_books: Optional[str] = None
    bookshop: Optional[str] = None


class BookCard(BaseModel):
    id: str
    title: str
    authors: List[str]
    author_display: str
    description: Optional[str] = None
    hook: str = ""
    categories: List[str] = []
    genre_display: str = "General"
    average_rating: Optional[float] = None
    rating_display: str = "—"
    page_count: Optional[int] = None
    page_count_display: str = "—"
    published_date: Optional[str] = None
    thumbnail_url: Optional[str] = None
    cover_url: Optional[str] = None
    info_link: Optional[str] = None
    purchase_links: Optional[PurchaseLinks] = None
