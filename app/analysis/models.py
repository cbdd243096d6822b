from dataclasses import dataclass, field


@dataclass(frozen=True)
class PartyInfo:
    """Sender of a document. Unknown values are None."""

    name: str | None = None
    address: str | None = None
    company_number: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class ReceiverInfo:
    name: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class DocumentDetails:
    case_number: str | None = None
    invoice_amount: float | None = None
    due_date: str | None = None
    date_created: str | None = None
    date_sent: str | None = None
    summary: str | None = None
    document_type: str | None = None


@dataclass(frozen=True)
class DocumentSummary:
    """Result of single-document analysis (no page boundaries)."""

    sender: PartyInfo = field(default_factory=PartyInfo)
    receiver: ReceiverInfo = field(default_factory=ReceiverInfo)
    document_details: DocumentDetails = field(default_factory=DocumentDetails)


@dataclass(frozen=True)
class DocumentRecord:
    """One logical document inside an upload, spanning pages start..end (1-indexed)."""

    start_page: int
    end_page: int
    sender: PartyInfo = field(default_factory=PartyInfo)
    receiver: ReceiverInfo = field(default_factory=ReceiverInfo)
    document_details: DocumentDetails = field(default_factory=DocumentDetails)


@dataclass(frozen=True)
class AnalysisResult:
    """Result of multi-document analysis."""

    total_pages: int
    documents: list[DocumentRecord] = field(default_factory=list)
    unique_pages: int | None = None


@dataclass(frozen=True)
class DocumentBoundary:
    document_number: int
    start_page: int


@dataclass(frozen=True)
class BoundaryResult:
    """Result of boundary-only analysis: where each document starts."""

    total_pages: int
    total_documents: int
    document_boundaries: list[DocumentBoundary] = field(default_factory=list)
