from dataclasses import dataclass, field

PAGE_BREAK_MARKER = "\n\n--- PAGE BREAK ---\n\n"


@dataclass(frozen=True)
class PdfText:
    """Text layer of a PDF, one entry per page in page order."""

    pages: list[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def text(self) -> str:
        return "\n".join(self.pages).strip()

    def with_page_breaks(self) -> str:
        """Join page texts with an explicit marker between pages."""
        return PAGE_BREAK_MARKER.join(page.strip() for page in self.pages)
