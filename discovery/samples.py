"""Built-in sample books shown when the search API cannot be reached."""

from typing import List

from .models.book import Book


def _cover(volume_id: str, zoom: int) -> str:
    return (
        f"https://books.google.com/books/content?id={volume_id}"
        f"&printsec=frontcover&img=1&zoom={zoom}"
    )


def _sample(volume_id: str, title: str, author: str, description: str,
            categories: List[str], rating: float, pages: int, published: str) -> Book:
    return Book(
        id=volume_id,
        title=title,
        authors=[author],
        description=description,
        categories=categories,
        average_rating=rating,
        page_count=pages,
        published_date=published,
        thumbnail_url=_cover(volume_id, 1),
        large_cover_url=_cover(volume_id, 3),
    )


SAMPLE_BOOKS: List[Book] = [
    _sample(
        "cygWzgEACAAJ", "The Seven Husbands of Evelyn Hugo", "Taylor Jenkins Reid",
        "Legendary film actress Evelyn Hugo has lived a life of glamour, ambition and "
        "scandal. When she finally decides to tell her story, she chooses unknown "
        "magazine reporter Monique Grant for the job.",
        ["Fiction", "Romance"], 4.3, 400, "2017-06-13",
    ),
    _sample(
        "NzjhzQEACAAJ", "Project Hail Mary", "Andy Weir",
        "The sole survivor on a desperate, last-chance mission wakes up with no memory "
        "of his own name, let alone the nature of his assignment or how to complete it.",
        ["Science Fiction", "Thriller"], 4.6, 482, "2021-05-04",
    ),
    _sample(
        "XVvGzwEACAAJ", "The Thursday Murder Club", "Richard Osman",
        "Four unlikely friends meet each week to investigate cold cases. When a brutal "
        "murder occurs in their own backyard they find themselves in the middle of "
        "their first live case.",
        ["Mystery", "Crime"], 4.1, 368, "2020-09-03",
    ),
    _sample(
        "fFCjDwAAQBAJ", "Atomic Habits", "James Clear",
        "An easy and proven way to build good habits and break bad ones. Tiny changes, "
        "remarkable results.",
        ["Self Help", "Psychology"], 4.7, 320, "2018-10-16",
    ),
    _sample(
        "RLV5DwAAQBAJ", "The Silent Patient", "Alex Michaelides",
        "A woman's act of violence against her husband, and the therapist obsessed with "
        "uncovering her motive. It will keep you guessing until the final page.",
        ["Mystery", "Psychological Thriller"], 4.2, 336, "2019-02-05",
    ),
    _sample(
        "2ObWDgAAQBAJ", "Educated", "Tara Westover",
        "A memoir about a young girl who, kept out of school, leaves her survivalist "
        "family and goes on to earn a PhD from Cambridge University.",
        ["Biography", "Memoir"], 4.4, 334, "2018-02-20",
    ),
    _sample(
        "W2ZDDwAAQBAJ", "The Midnight Library", "Matt Haig",
        "Between life and death there is a library, and within that library the shelves "
        "go on forever. Every book provides a chance to try another life you could have lived.",
        ["Fiction", "Fantasy"], 4.0, 288, "2020-08-13",
    ),
    _sample(
        "B1hSG45JCX4C", "Dune", "Frank Herbert",
        "Set on the desert planet Arrakis, Dune is the story of the boy Paul Atreides, "
        "heir to a noble family tasked with ruling an inhospitable world.",
        ["Science Fiction", "Adventure"], 4.3, 688, "1965-08-01",
    ),
    _sample(
        "H7GeDAAAQBAJ", "Normal People", "Sally Rooney",
        "A story of mutual fascination, friendship and love, following two people who "
        "try to stay apart but find they can't.",
        ["Fiction", "Literary Fiction"], 3.9, 266, "2018-08-28",
    ),
    _sample(
        "hi18DwAAQBAJ", "Becoming", "Michelle Obama",
        "A work of deep reflection and mesmerizing storytelling in which Michelle Obama "
        "invites readers into her world, chronicling the experiences that have shaped her.",
        ["Biography", "Politics"], 4.5, 448, "2018-11-13",
    ),
]
