from dataclasses import dataclass, field
from enum import Enum

from app.pdf.models import PdfText

PDF_MEDIA_TYPE = "application/pdf"


class ExtractionMode(str, Enum):
    """How the upstream service should read the document."""

    NATIVE_TEXT = "native_text"
    VISUAL_FALLBACK = "visual_fallback"


@dataclass(frozen=True)
class UploadedFile:
    """A single uploaded file, alive for the duration of one request."""

    content: bytes
    media_type: str
    filename: str | None = None

    @property
    def is_pdf(self) -> bool:
        return self.media_type == PDF_MEDIA_TYPE

    @property
    def is_image(self) -> bool:
        return self.media_type.startswith("image/")


@dataclass(frozen=True)
class ExtractionResult:
    """Output of the content extractor.

    ``content`` and ``media_type`` describe the bytes to send on the visual
    path. For images they may differ from the upload after recompression.
    """

    mode: ExtractionMode
    page_count: int
    content: bytes
    media_type: str
    text: str = ""
    pages: list[str] = field(default_factory=list)

    @property
    def is_visual(self) -> bool:
        return self.mode is ExtractionMode.VISUAL_FALLBACK

    def text_with_page_breaks(self) -> str:
        return PdfText(pages=self.pages).with_page_breaks()
