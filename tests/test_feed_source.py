"""
Feed source tests: subject rotation, per-subject paging, sample fallback.

Run:
----
    pytest tests/test_feed_source.py -v
"""

import asyncio
import random

import pytest

from backend.services import RateLimitedError
from discovery import SAMPLE_BOOKS, FeedConfig, FeedSource, SampleSource

from fakes import RecordingSearch, make_books


def _source(search, subjects=("mystery", "romance"), batch_size=10):
    config = FeedConfig(subjects=list(subjects), batch_size=batch_size)
    return FeedSource(search, config, rng=random.Random(7))


class TestFeedSource:
    def test_subjects_are_a_permutation_of_config(self):
        source = _source(RecordingSearch(), subjects=("a", "b", "c", "d"))
        assert sorted(source.subjects) == ["a", "b", "c", "d"]

    def test_rotates_round_robin(self):
        search = RecordingSearch(default=make_books("x"))
        source = _source(search)
        first, second = source.subjects

        async def scenario():
            for _ in range(4):
                await source.fetch_batch()

        asyncio.run(scenario())
        queries = [c["query"] for c in search.calls]
        assert queries == [f"subject:{first}", f"subject:{second}", f"subject:{first}", f"subject:{second}"]

    def test_non_empty_page_advances_offset(self):
        search = RecordingSearch(default=make_books("x"))
        source = _source(search, subjects=("mystery",), batch_size=5)

        async def scenario():
            await source.fetch_batch()
            await source.fetch_batch()

        asyncio.run(scenario())
        assert [c["start_index"] for c in search.calls] == [0, 5]
        assert all(c["max_results"] == 5 for c in search.calls)
        assert source.offset_for("mystery") == 10

    def test_empty_page_resets_offset(self):
        search = RecordingSearch(pages={("subject:mystery", 0): make_books("x")})
        source = _source(search, subjects=("mystery",), batch_size=10)

        async def scenario():
            first = await source.fetch_batch()
            second = await source.fetch_batch()
            return first, second

        first, second = asyncio.run(scenario())
        assert len(first) == 1
        assert second == []
        assert source.offset_for("mystery") == 0

    def test_errors_propagate(self):
        source = _source(RecordingSearch(error=RateLimitedError()))
        with pytest.raises(RateLimitedError):
            asyncio.run(source.fetch_batch())

    def test_error_does_not_advance_offset(self):
        source = _source(RecordingSearch(error=RateLimitedError()), subjects=("mystery",))
        with pytest.raises(RateLimitedError):
            asyncio.run(source.fetch_batch())
        assert source.offset_for("mystery") == 0


class TestSampleSource:
    def test_serves_built_in_samples(self):
        books = asyncio.run(SampleSource().fetch_batch())
        assert len(books) == 10
        assert [b.id for b in books] == [b.id for b in SAMPLE_BOOKS]

    def test_samples_have_covers_and_descriptions(self):
        for book in SAMPLE_BOOKS:
            assert book.thumbnail_url.startswith("https://")
            assert book.description
