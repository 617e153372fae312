"""
Unit tests for the object domain logic.

These tests verify naming, models and the post register without touching
external services (no object store, no HTTP).

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Use descriptive names that explain what we're testing
- Prefer real objects over mocks where practical
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from objectgate.core.objects.models import (
    ObjectListing,
    ObjectSummary,
    RetrievedObject,
    content_disposition,
)
from objectgate.core.objects.naming import build_storage_key, current_millis
from objectgate.core.posts.register import PostRecord, PostRegister


async def _empty_stream():
    if False:
        yield b""


# ---------------------------------------------------------------------------
# Naming Tests
# ---------------------------------------------------------------------------

class TestStorageKeyNaming:
    """Tests for timestamp-prefixed storage keys."""

    def test_key_is_timestamp_then_filename(self):
        """Keys are '<millis>-<filename>'."""
        key = build_storage_key("a.txt", clock=lambda: 1700000000123)
        assert key == "1700000000123-a.txt"

    def test_key_ends_with_original_filename(self):
        """The original filename is always the key suffix."""
        key = build_storage_key("report.pdf")
        prefix, _, rest = key.partition("-")
        assert rest == "report.pdf"
        assert prefix.isdigit()

    def test_empty_filename_still_yields_key(self):
        """An empty filename produces just the timestamp and delimiter."""
        assert build_storage_key("", clock=lambda: 42) == "42-"

    def test_path_characters_pass_through_unchanged(self):
        """Filenames are not sanitized."""
        key = build_storage_key("../etc/passwd", clock=lambda: 1)
        assert key == "1-../etc/passwd"

    def test_same_tick_same_filename_collides(self):
        """Identical filename in the same millisecond gives the same key (accepted risk)."""
        clock = lambda: 1000  # noqa: E731
        assert build_storage_key("x", clock=clock) == build_storage_key("x", clock=clock)

    def test_current_millis_is_epoch_milliseconds(self):
        """The default clock is in milliseconds, not seconds or nanoseconds."""
        millis = current_millis()
        assert 1_600_000_000_000 < millis < 10_000_000_000_000


# ---------------------------------------------------------------------------
# Model Tests
# ---------------------------------------------------------------------------

class TestContentDisposition:
    """Tests for the download filename header."""

    def test_ascii_name_is_quoted(self):
        assert content_disposition("a.txt") == 'attachment; filename="a.txt"'

    def test_quotes_are_escaped(self):
        assert content_disposition('say "hi".txt') == 'attachment; filename="say \\"hi\\".txt"'

    def test_non_ascii_name_gets_rfc5987_parameter(self):
        """Non-latin names can't go in a header raw."""
        header = content_disposition("résumé.pdf")
        assert 'filename="r_sum_.pdf"' in header
        assert "filename*=UTF-8''r%C3%A9sum%C3%A9.pdf" in header
        header.encode("latin-1")


class TestRetrievedObject:
    """Tests for the headers a download is served with."""

    def test_headers_include_disposition_when_name_known(self):
        obj = RetrievedObject(
            key="1-a.txt",
            content_type="text/plain",
            content_length=2,
            stream=_empty_stream(),
            original_name="a.txt",
        )
        assert obj.headers == {
            "Content-Type": "text/plain",
            "Content-Length": "2",
            "Content-Disposition": 'attachment; filename="a.txt"',
        }

    def test_headers_omit_disposition_without_name(self):
        obj = RetrievedObject(
            key="raw-key",
            content_type="application/octet-stream",
            content_length=0,
            stream=_empty_stream(),
        )
        assert "Content-Disposition" not in obj.headers


class TestObjectListing:
    """Tests for listing aggregates."""

    def test_count_tracks_files(self):
        listing = ObjectListing(bucket="b")
        assert listing.count == 0

        listing.files.append(ObjectSummary(name="k1", size=1))
        listing.files.append(ObjectSummary(name="k2", size=2, original_name="k2", content_type="x/y"))
        assert listing.count == 2

    def test_degraded_entry_has_no_metadata(self):
        assert ObjectSummary(name="k", size=1).degraded
        assert not ObjectSummary(name="k", size=1, original_name="a", content_type="t/p").degraded


# ---------------------------------------------------------------------------
# Post Register Tests
# ---------------------------------------------------------------------------

class TestPostRegister:
    """Tests for the in-memory post register."""

    def test_new_register_is_empty(self):
        register = PostRegister()
        assert register.list() == []
        assert len(register) == 0

    def test_append_assigns_sequential_ids(self):
        """Ids start at 1 and increase by one per append."""
        register = PostRegister()

        first = register.append("t", "d", "k")
        second = register.append("t2", "d2", "k2")

        assert first == PostRecord(id=1, title="t", description="d", file_key="k")
        assert second.id == 2

    def test_list_returns_creation_order(self):
        register = PostRegister()
        for i in range(5):
            register.append(f"title-{i}", None, f"key-{i}")

        assert [post.title for post in register.list()] == [f"title-{i}" for i in range(5)]

    def test_no_validation_of_inputs(self):
        """Missing fields and unknown keys are accepted as-is."""
        register = PostRegister()
        post = register.append(None, None, "never-uploaded")
        assert post.title is None
        assert post.file_key == "never-uploaded"

    def test_list_is_a_snapshot(self):
        """Mutating the returned list doesn't touch the register."""
        register = PostRegister()
        register.append("t", "d", "k")

        snapshot = register.list()
        snapshot.clear()

        assert len(register.list()) == 1

    def test_separate_registers_do_not_share_state(self):
        a = PostRegister()
        b = PostRegister()
        a.append("t", "d", "k")

        assert b.list() == []
        assert b.append("t", "d", "k").id == 1

    def test_concurrent_appends_never_duplicate_or_skip_ids(self):
        """Many threads appending at once still get 1..N exactly once each."""
        register = PostRegister()
        start = threading.Barrier(8)

        def worker(n: int) -> list[int]:
            start.wait()
            return [register.append(f"t{n}", "d", f"k{n}-{i}").id for i in range(50)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(worker, range(8)))

        ids = sorted(i for batch in results for i in batch)
        assert ids == list(range(1, 401))
        assert [post.id for post in register.list()] == list(range(1, 401))

    @pytest.mark.parametrize("count", [1, 3])
    def test_len_matches_appends(self, count):
        register = PostRegister()
        for _ in range(count):
            register.append("t", "d", "k")
        assert len(register) == count
