import io

import pdfplumber

from app.pdf.base import BasePdfExtractor
from app.pdf.exceptions import PdfExtractionError
from app.pdf.models import PdfText


class PdfPlumberAdapter(BasePdfExtractor):
    """Reads per-page text from a PDF using pdfplumber."""

    def extract(self, pdf_bytes: bytes) -> PdfText:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc
        if not pages:
            raise PdfExtractionError("pdfplumber extraction failed: PDF has no pages")
        return PdfText(pages=pages)
