"""
Tests for responsive image variants and the upload service.

Source images are generated in memory with Pillow.
"""

import io
import os

import pytest
from PIL import Image

from easel.components.platform import image_variants_comp
from easel.helpers.dto.image_dto import CropBox
from easel.helpers.exceptions import ContentValidationError, ImageProcessingError
from easel.services.infrastructure.image_upload_svc import ImageUploadService, parse_crop

pytestmark = pytest.mark.unit


def _png(width: int, height: int, mode: str = "RGB") -> bytes:
    color = (200, 120, 40, 128) if mode == "RGBA" else (200, 120, 40)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, "PNG")
    return buffer.getvalue()


def _size(path) -> tuple[int, int]:
    with Image.open(path) as image:
        return image.size


@pytest.fixture
def uploads(tmp_path) -> ImageUploadService:
    return ImageUploadService(str(tmp_path / "attached_assets"))


class TestParseCrop:
    def test_absent_or_empty(self):
        assert parse_crop(None) is None
        assert parse_crop("") is None
        assert parse_crop("{}") is None

    def test_zero_size_means_no_crop(self):
        assert parse_crop('{"x": 5, "y": 5, "width": 0, "height": 100}') is None

    def test_coordinates_are_rounded(self):
        box = parse_crop('{"x": 10.4, "y": 20.6, "width": 300.2, "height": 199.5}')
        assert box == CropBox(left=10, top=21, width=300, height=200)

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"x": "a", "width": 10, "height": 10}'])
    def test_malformed(self, raw):
        with pytest.raises(ContentValidationError, match="Invalid crop data"):
            parse_crop(raw)


class TestVariants:
    def test_wide_image_gets_every_width(self, tmp_path):
        image = image_variants_comp.open_image(_png(3000, 1500))

        variants = image_variants_comp.write_variants(image, str(tmp_path / "out"), "/attached_assets/optimized/x")

        assert [v.width for v in variants] == [480, 960, 1440, 2048]
        assert variants[1].webp == "/attached_assets/optimized/x/960w.webp"
        assert variants[1].jpeg == "/attached_assets/optimized/x/960w.jpg"
        assert _size(tmp_path / "out" / "480w.jpg") == (480, 240)
        assert _size(tmp_path / "out" / "2048w.webp") == (2048, 1024)

    def test_narrow_image_is_never_enlarged(self, tmp_path):
        image = image_variants_comp.open_image(_png(600, 400))

        image_variants_comp.write_variants(image, str(tmp_path), "/x")

        assert _size(tmp_path / "480w.jpg") == (480, 320)
        for width in (960, 1440, 2048):
            assert _size(tmp_path / f"{width}w.jpg") == (600, 400)
            assert _size(tmp_path / f"{width}w.webp") == (600, 400)

    def test_transparent_source_writes_jpeg(self, tmp_path):
        image = image_variants_comp.open_image(_png(500, 500, mode="RGBA"))

        image_variants_comp.write_variants(image, str(tmp_path), "/x")

        with Image.open(tmp_path / "480w.jpg") as jpeg:
            assert jpeg.mode == "RGB"

    def test_undecodable_bytes(self):
        with pytest.raises(ImageProcessingError):
            image_variants_comp.open_image(b"definitely not an image")

    def test_crop_outside_image(self):
        image = image_variants_comp.open_image(_png(100, 100))
        with pytest.raises(ContentValidationError, match="outside the image"):
            image_variants_comp.crop(image, CropBox(left=50, top=50, width=80, height=10))


class TestImageUploadService:
    def test_upload_under_slug(self, uploads):
        result = uploads.process(_png(1200, 800), slug="sunrise")

        assert result.url == "/attached_assets/optimized/sunrise/960w.jpg"
        assert len(result.variants) == 4
        folder = os.path.join(uploads.assets_dir, "optimized", "sunrise")
        assert sorted(os.listdir(folder)) == [
            "1440w.jpg",
            "1440w.webp",
            "2048w.jpg",
            "2048w.webp",
            "480w.jpg",
            "480w.webp",
            "960w.jpg",
            "960w.webp",
        ]

    def test_crop_applied_before_resizing(self, uploads):
        uploads.process(_png(2000, 2000), crop_data='{"x": 0, "y": 0, "width": 1000, "height": 500}', slug="cropped")

        folder = os.path.join(uploads.assets_dir, "optimized", "cropped")
        assert _size(os.path.join(folder, "960w.jpg")) == (960, 480)
        assert _size(os.path.join(folder, "2048w.jpg")) == (1000, 500)

    def test_missing_slug_gets_a_uuid_folder(self, uploads):
        result = uploads.process(_png(100, 100))

        folder = result.url.split("/")[3]
        assert len(folder) == 36
        assert os.path.isdir(os.path.join(uploads.assets_dir, "optimized", folder))

    @pytest.mark.parametrize("slug", ["../escape", "Upper", "with space", "a/b"])
    def test_unsafe_slug_rejected(self, uploads, slug):
        with pytest.raises(ContentValidationError, match="Invalid slug"):
            uploads.process(_png(100, 100), slug=slug)
        assert not os.path.exists(uploads.assets_dir)
