import io

from PIL import Image

from app.logging.logger import Log

JPEG_MEDIA_TYPE = "image/jpeg"


class ImageCompressor:
    """Downscales and re-encodes images before they are sent for visual analysis.

    The longest edge is bounded by ``max_edge_px`` (never upscaled) and the
    result is a progressive JPEG. Compression only saves payload size, so any
    failure returns the original bytes and media type unchanged.
    """

    def __init__(self, max_edge_px: int = 1500, jpeg_quality: int = 85) -> None:
        self._max_edge_px = max_edge_px
        self._jpeg_quality = jpeg_quality

    def compress(self, image_bytes: bytes, media_type: str) -> tuple[bytes, str]:
        try:
            compressed = self._compress(image_bytes)
        except Exception as exc:
            Log.warning(f"Image compression failed, using original bytes: {exc}")
            return image_bytes, media_type
        Log.info(
            f"Image compressed from {len(image_bytes)} to {len(compressed)} bytes"
        )
        return compressed, JPEG_MEDIA_TYPE

    def _compress(self, image_bytes: bytes) -> bytes:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.load()
            if image.mode != "RGB":
                image = image.convert("RGB")
            image.thumbnail((self._max_edge_px, self._max_edge_px))
            buffered = io.BytesIO()
            image.save(
                buffered,
                format="JPEG",
                quality=self._jpeg_quality,
                progressive=True,
            )
        return buffered.getvalue()
