import pymupdf

from app.pdf.base import BasePdfExtractor
from app.pdf.exceptions import PdfExtractionError
from app.pdf.models import PdfText


class PyMuPdfAdapter(BasePdfExtractor):
    """Reads per-page text from a PDF using PyMuPDF."""

    def extract(self, pdf_bytes: bytes) -> PdfText:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc
        if not pages:
            raise PdfExtractionError("pymupdf extraction failed: PDF has no pages")
        return PdfText(pages=pages)
