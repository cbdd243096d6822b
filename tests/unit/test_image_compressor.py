import io
from unittest.mock import patch

from PIL import Image

from app.extraction.image_compressor import ImageCompressor


class TestImageCompressor:
    def test_downscales_longest_edge(self, large_png_bytes: bytes) -> None:
        content, media_type = ImageCompressor(max_edge_px=1500).compress(
            large_png_bytes, "image/png"
        )
        assert media_type == "image/jpeg"
        with Image.open(io.BytesIO(content)) as image:
            assert image.format == "JPEG"
            assert image.size == (1500, 1000)

    def test_does_not_upscale(self, small_png_bytes: bytes) -> None:
        content, _ = ImageCompressor(max_edge_px=1500).compress(small_png_bytes, "image/png")
        with Image.open(io.BytesIO(content)) as image:
            assert image.size == (400, 300)

    def test_converts_alpha_to_rgb(self, large_png_bytes: bytes) -> None:
        content, _ = ImageCompressor().compress(large_png_bytes, "image/png")
        with Image.open(io.BytesIO(content)) as image:
            assert image.mode == "RGB"

    def test_failure_returns_original(self) -> None:
        content, media_type = ImageCompressor().compress(b"\x89PNG broken", "image/png")
        assert content == b"\x89PNG broken"
        assert media_type == "image/png"

    def test_failure_is_logged_as_warning(self) -> None:
        with patch("app.extraction.image_compressor.Log") as mock_log:
            ImageCompressor().compress(b"broken", "image/webp")
        assert mock_log.warning.call_count == 1
        assert "compression failed" in mock_log.warning.call_args.args[0]
