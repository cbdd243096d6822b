from abc import ABC, abstractmethod

from app.pdf.models import PdfText


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> PdfText:
        """Read the text layer of every page.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            PdfText with one (possibly empty) string per page. Scanned pages
            without a text layer yield empty strings but still count as pages.

        Raises:
            PdfExtractionError: if the PDF cannot be parsed.
        """
