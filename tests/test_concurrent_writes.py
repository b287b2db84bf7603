"""
Tests for check-then-write operations racing across request threads.

API routes run in a threadpool, so each test releases a batch of threads at
once with a barrier and checks that singleton and uniqueness rules still hold.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from easel.helpers.exceptions import ConflictError
from easel.services.domain.artist_svc import ArtistService
from easel.services.domain.artwork_svc import ArtworkService
from easel.services.domain.settings_svc import SettingsService

pytestmark = pytest.mark.unit

THREADS = 16


def _race(fn):
    """Run `fn` from THREADS threads released together; return (results, errors)."""
    barrier = threading.Barrier(THREADS)

    def run(n):
        barrier.wait()
        return fn(n)

    results, errors = [], []
    with ThreadPoolExecutor(max_workers=THREADS) as pool:
        futures = [pool.submit(run, n) for n in range(THREADS)]
        for future in futures:
            try:
                results.append(future.result(timeout=30))
            except ConflictError as e:
                errors.append(e)
    return results, errors


class TestSingletons:
    def test_concurrent_settings_reads_create_one_record(self, test_db):
        settings = SettingsService(test_db)

        results, errors = _race(lambda n: settings.get())

        assert errors == []
        assert test_db.settings.count() == 1
        assert len({r["id"] for r in results}) == 1

    def test_concurrent_settings_updates_create_one_record(self, test_db):
        settings = SettingsService(test_db)

        _race(lambda n: settings.update({"accentHue": n * 10}))

        assert test_db.settings.count() == 1

    def test_concurrent_artist_updates_create_one_record(self, test_db):
        artist = ArtistService(test_db)

        _race(lambda n: artist.update({"name": f"Artist {n}"}))

        assert test_db.artist.count() == 1
        assert artist.get()["name"].startswith("Artist ")


class TestUniqueness:
    def test_concurrent_creates_with_same_slug(self, test_db):
        artworks = ArtworkService(test_db)

        results, errors = _race(lambda n: artworks.create({"title": f"Sunrise {n}", "slug": "sunrise"}))

        assert len(results) == 1
        assert len(errors) == THREADS - 1
        assert test_db.artworks.count({"slug": "sunrise"}) == 1

    def test_concurrent_renames_to_same_slug(self, test_db):
        artworks = ArtworkService(test_db)
        ids = [artworks.create({"title": f"A{n}", "slug": f"a-{n}"})["id"] for n in range(THREADS)]

        results, errors = _race(lambda n: artworks.update(ids[n], {"slug": "sunrise"}))

        assert len(results) == 1
        assert len(errors) == THREADS - 1
        assert test_db.artworks.count({"slug": "sunrise"}) == 1

    def test_concurrent_signups_with_same_email(self, user_service, keys_service, test_db, monkeypatch):
        monkeypatch.setattr(keys_service, "hash_password", lambda password: f"hashed:{password}")

        results, errors = _race(lambda n: user_service.create_user("Same@Example.com", "long-enough-password"))

        assert len(results) == 1
        assert len(errors) == THREADS - 1
        assert test_db.users.count({"email": "same@example.com"}) == 1
