"""
Book model: immutable snapshot of a catalog entry from the book-search API.

Used by the prefetch queue, the discovery session and the API cards.
Built from Google Books volume payloads via Book.from_volume(item).
"""

from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict

UNKNOWN_AUTHOR = "Unknown Author"
HOOK_MAX_LENGTH = 120


def _https(url: Optional[str]) -> Optional[str]:
    """Cover links come back as http://; clients only load https."""
    if url is None:
        return None
    return url.replace("http://", "https://")


def _best_image(image_links: Dict[str, Any]) -> Optional[str]:
    for key in ("large", "medium", "small", "thumbnail", "smallThumbnail"):
        if image_links.get(key):
            return image_links[key]
    return None


class Book(BaseModel):
    """
    A single book from the search API.

    Only id and title are required; everything else may be missing from the
    upstream payload. Never persisted locally.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    authors: List[str] = [UNKNOWN_AUTHOR]
    description: Optional[str] = None
    categories: List[str] = []
    average_rating: Optional[float] = None
    page_count: Optional[int] = None
    published_date: Optional[str] = None
    thumbnail_url: Optional[str] = None
    large_cover_url: Optional[str] = None
    info_link: Optional[str] = None

    @classmethod
    def from_volume(cls, item: Dict[str, Any]) -> "Book":
        """Map one entry of a volumes response (``{"id", "volumeInfo"}``)."""
        info = item.get("volumeInfo") or {}
        image_links = info.get("imageLinks") or {}
        return cls(
            id=item["id"],
            title=info.get("title") or "",
            authors=info.get("authors") or [UNKNOWN_AUTHOR],
            description=info.get("description"),
            categories=info.get("categories") or [],
            average_rating=info.get("averageRating"),
            page_count=info.get("pageCount"),
            published_date=info.get("publishedDate"),
            thumbnail_url=_https(image_links.get("thumbnail")),
            large_cover_url=_https(_best_image(image_links)),
            info_link=info.get("infoLink"),
        )

    @property
    def author_display(self) -> str:
        return ", ".join(self.authors)

    @property
    def genre_display(self) -> str:
        return self.categories[0] if self.categories else "General"

    @property
    def hook(self) -> str:
        """Short teaser for the feed card."""
        if not self.description:
            return ""
        if len(self.description) > HOOK_MAX_LENGTH:
            return self.description[: HOOK_MAX_LENGTH - 3] + "..."
        return self.description

    @property
    def rating_display(self) -> str:
        if self.average_rating is None:
            return "—"
        return f"{self.average_rating:.1f}"

    @property
    def page_count_display(self) -> str:
        if self.page_count is None:
            return "—"
        return f"{self.page_count} pages"

    @property
    def high_quality_image_url(self) -> Optional[str]:
        if self.large_cover_url:
            return self.large_cover_url
        if self.thumbnail_url:
            return self.thumbnail_url
        return None

    # Purchase links

    def _search_term(self) -> str:
        return quote_plus(f"{self.title} {self.author_display}".strip())

    @property
    def amazon_url(self) -> Optional[str]:
        term = self._search_term()
        if not term:
            return None
        return f"https://www.amazon.com/s?k={term}&i=stripbooks&ref=nb_sb_noss"

    @property
    def apple_books_url(self) -> Optional[str]:
        term = self._search_term()
        if not term:
            return None
        return f"https://books.apple.com/us/search?term={term}"

    @property
    def bookshop_url(self) -> Optional[str]:
        term = self._search_term()
        if not term:
            return None
        return f"https://bookshop.org/search?keywords={term}"

    def purchase_links(self) -> Dict[str, Optional[str]]:
        return {
            "amazon": self.amazon_url,
            "apple_books": self.apple_books_url,
            "bookshop": self.bookshop_url,
        }


def ensure_books(items: List[Union[Dict[str, Any], "Book"]]) -> List["Book"]:
    """Convert list of dicts or Books to list of Book models."""
    return [
        Book.model_validate(b) if isinstance(b, dict) else b
        for b in items
    ]
