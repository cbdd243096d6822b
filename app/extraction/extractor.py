from collections.abc import Collection

from app.extraction.exceptions import UnsupportedMediaTypeError
from app.extraction.image_compressor import ImageCompressor
from app.extraction.models import ExtractionMode, ExtractionResult, UploadedFile
from app.logging.logger import Log
from app.pdf.base import BasePdfExtractor


class ContentExtractor:
    """Decides whether an upload is read as text or handed over as an image.

    PDFs whose trimmed text layer is shorter than ``min_text_chars`` are
    treated as scans and take the visual path, like images do.
    """

    DEFAULT_MIN_TEXT_CHARS = 50

    def __init__(
        self,
        pdf_extractor: BasePdfExtractor,
        image_compressor: ImageCompressor,
        min_text_chars: int = DEFAULT_MIN_TEXT_CHARS,
    ) -> None:
        self._pdf_extractor = pdf_extractor
        self._image_compressor = image_compressor
        self._min_text_chars = min_text_chars

    def extract(
        self,
        upload: UploadedFile,
        accepted: Collection[str] | None = None,
    ) -> ExtractionResult:
        """Classify the upload and extract what the analysis step needs.

        Args:
            upload: The uploaded file.
            accepted: Optional whitelist of media types; anything outside it
                      is rejected even if it would otherwise be supported.

        Raises:
            UnsupportedMediaTypeError: for media types other than PDF or image.
            PdfExtractionError: if a PDF cannot be parsed.
        """
        if accepted is not None and upload.media_type not in accepted:
            raise UnsupportedMediaTypeError(
                f"Unsupported file type '{upload.media_type}'. "
                f"Accepted: {', '.join(sorted(accepted))}"
            )
        if upload.is_pdf:
            return self._extract_pdf(upload)
        if upload.is_image:
            return self._extract_image(upload)
        raise UnsupportedMediaTypeError(
            f"Unsupported file type '{upload.media_type}'. "
            "Only PDF files and images are supported"
        )

    def _extract_pdf(self, upload: UploadedFile) -> ExtractionResult:
        pdf_text = self._pdf_extractor.extract(upload.content)
        text = pdf_text.text
        if len(text) < self._min_text_chars:
            Log.info(
                "PDF has no usable text layer, using visual analysis",
                chars=len(text),
                pages=pdf_text.page_count,
            )
            return ExtractionResult(
                mode=ExtractionMode.VISUAL_FALLBACK,
                page_count=pdf_text.page_count,
                content=upload.content,
                media_type=upload.media_type,
            )
        Log.info(
            "Extracted PDF text layer",
            chars=len(text),
            pages=pdf_text.page_count,
        )
        return ExtractionResult(
            mode=ExtractionMode.NATIVE_TEXT,
            page_count=pdf_text.page_count,
            content=upload.content,
            media_type=upload.media_type,
            text=text,
            pages=list(pdf_text.pages),
        )

    def _extract_image(self, upload: UploadedFile) -> ExtractionResult:
        content, media_type = self._image_compressor.compress(
            upload.content, upload.media_type
        )
        return ExtractionResult(
            mode=ExtractionMode.VISUAL_FALLBACK,
            page_count=1,
            content=content,
            media_type=media_type,
        )
