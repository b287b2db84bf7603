"""
Tests for the artwork, artist, FAQ and settings services.
"""

import itertools

import pytest

from easel.helpers.exceptions import ConflictError, ContentValidationError
from easel.persistence.database import collection_ops
from easel.services.domain.artist_svc import ArtistService
from easel.services.domain.artwork_svc import ArtworkService, normalize_images
from easel.services.domain.faq_svc import FaqService
from easel.services.domain.settings_svc import SettingsService, validate_settings

pytestmark = pytest.mark.unit


@pytest.fixture
def ticking_clock(monkeypatch):
    """Strictly increasing createdAt values so newest-first order is deterministic."""
    ticks = itertools.count(1_700_000_000_000, 1000)
    monkeypatch.setattr(collection_ops, "now_ms", lambda: next(ticks))


@pytest.fixture
def artworks(test_db):
    return ArtworkService(test_db)


class TestArtworkService:
    def test_related_excludes_self_and_other_categories(self, artworks):
        artworks.create({"title": "Sunrise", "slug": "sunrise", "category": "original"})
        artworks.create({"title": "Dusk", "slug": "dusk", "category": "original"})
        artworks.create({"title": "Fern", "slug": "fern", "category": "original"})
        artworks.create({"title": "Home", "slug": "home", "category": "commission"})

        related = artworks.list_related("sunrise")

        assert sorted(a["slug"] for a in related) == ["dusk", "fern"]

    def test_related_is_capped(self, artworks):
        for n in range(6):
            artworks.create({"title": f"A{n}", "slug": f"a-{n}", "category": "original"})
        assert len(artworks.list_related("a-0")) == 3

    def test_related_unknown_slug_is_empty(self, artworks):
        assert artworks.list_related("missing") == []

    def test_list_is_newest_first(self, artworks, ticking_clock):
        artworks.create({"title": "Old", "slug": "old"})
        artworks.create({"title": "New", "slug": "new"})
        assert [a["slug"] for a in artworks.list_artworks()] == ["new", "old"]

    def test_featured_only(self, artworks, ticking_clock):
        artworks.create({"title": "A", "slug": "a", "featured": True})
        artworks.create({"title": "B", "slug": "b"})
        artworks.create({"title": "C", "slug": "c", "featured": True})
        assert [a["slug"] for a in artworks.list_featured()] == ["c", "a"]

    def test_create_defaults_featured_false(self, artworks):
        created = artworks.create({"title": "A", "slug": "a"})
        assert created["featured"] is False
        assert created["images"] == []

    def test_duplicate_slug_rejected(self, artworks, test_db):
        artworks.create({"title": "A", "slug": "same"})
        with pytest.raises(ConflictError):
            artworks.create({"title": "B", "slug": "same"})
        assert test_db.artworks.count() == 1

    def test_rename_to_taken_slug_rejected(self, artworks):
        artworks.create({"title": "A", "slug": "a"})
        b = artworks.create({"title": "B", "slug": "b"})
        with pytest.raises(ConflictError):
            artworks.update(b["id"], {"slug": "a"})

    def test_update_keeping_own_slug_is_allowed(self, artworks):
        a = artworks.create({"title": "A", "slug": "a"})
        updated = artworks.update(a["id"], {"slug": "a", "price": 10})
        assert updated["price"] == 10

    def test_update_and_delete_unknown_id(self, artworks):
        assert artworks.update(42, {"title": "x"}) is None
        assert artworks.delete(42) is False

    def test_get_and_delete_by_public_id(self, artworks):
        created = artworks.create({"title": "A", "slug": "a"})
        assert artworks.get(created["id"])["slug"] == "a"
        assert artworks.delete(created["id"]) is True
        assert artworks.get_by_slug("a") is None


class TestImages:
    def test_only_first_flagged_image_stays_primary(self):
        images = normalize_images(
            [
                {"url": "/1.webp", "isPrimary": False},
                {"url": "/2.webp", "isPrimary": True},
                {"url": "/3.webp", "isPrimary": True},
            ]
        )
        assert [i["isPrimary"] for i in images] == [False, True, False]

    def test_no_images(self):
        assert normalize_images(None) == []

    def test_update_normalizes_images(self, artworks):
        created = artworks.create({"title": "A", "slug": "a"})
        updated = artworks.update(
            created["id"], {"images": [{"url": "/1.webp", "isPrimary": True}, {"url": "/2.webp", "isPrimary": True}]}
        )
        assert [i["isPrimary"] for i in updated["images"]] == [True, False]


class TestArtistService:
    def test_absent_until_first_update(self, test_db):
        assert ArtistService(test_db).get() is None

    def test_update_is_an_upsert(self, test_db):
        service = ArtistService(test_db)
        first = service.update({"name": "Jo Painter"})
        second = service.update({"bio": "Paints marshes."})

        assert test_db.artist.count() == 1
        assert second["id"] == first["id"]
        assert second["name"] == "Jo Painter"
        assert second["bio"] == "Paints marshes."


class TestFaqService:
    def test_sorted_by_order(self, test_db):
        service = FaqService(test_db)
        service.create({"question": "Third", "answer": "c", "order": 3})
        service.create({"question": "First", "answer": "a", "order": 1})
        service.create({"question": "Second", "answer": "b", "order": 2})
        assert [f["question"] for f in service.list_faqs()] == ["First", "Second", "Third"]

    def test_order_defaults_to_zero(self, test_db):
        assert FaqService(test_db).create({"question": "Q", "answer": "A"})["order"] == 0

    def test_update_and_delete(self, test_db):
        service = FaqService(test_db)
        faq = service.create({"question": "Q", "answer": "A"})
        assert service.update(faq["id"], {"answer": "B"})["answer"] == "B"
        assert service.delete(faq["id"]) is True
        assert service.update(faq["id"], {"answer": "C"}) is None
        assert service.delete(faq["id"]) is False


class TestSettingsService:
    def test_get_creates_defaults_once(self, test_db):
        service = SettingsService(test_db)
        first = service.get()
        second = service.get()
        assert first["accentHue"] == 186
        assert second["id"] == first["id"]
        assert test_db.settings.count() == 1

    def test_update_is_an_upsert(self, test_db):
        service = SettingsService(test_db)
        service.update({"accentHue": 10})
        updated = service.update({"accentLightness": 60})

        assert test_db.settings.count() == 1
        assert updated["accentHue"] == 10
        assert updated["accentLightness"] == 60
        assert updated["accentSaturation"] == 68

    @pytest.mark.parametrize(
        ("patch", "message"),
        [
            ({"accentHue": 361}, "accentHue must be between 0 and 360"),
            ({"accentSaturation": -1}, "accentSaturation must be between 0 and 100"),
            ({"accentLightness": "bright"}, "accentLightness must be a number"),
            ({"accentHue": True}, "accentHue must be a number"),
        ],
    )
    def test_out_of_range_rejected(self, test_db, patch, message):
        with pytest.raises(ContentValidationError, match=message):
            SettingsService(test_db).update(patch)
        assert test_db.settings.count() == 0

    def test_bounds_are_inclusive(self):
        assert validate_settings({"accentHue": 360, "accentSaturation": 0}) == {"accentHue": 360, "accentSaturation": 0}
