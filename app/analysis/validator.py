"""Builds typed analysis results from the parsed model reply.

Descriptive fields are read leniently: the model is told to use null for
anything it cannot find, and in practice also emits empty strings, "unknown"
or amounts formatted as text. Structural fields that page accounting depends
on (``totalPages``, ``documents``, page numbers) are strict.
"""

import re
from typing import Any

from app.analysis.exceptions import InvalidStructureError
from app.analysis.models import (
    AnalysisResult,
    BoundaryResult,
    DocumentBoundary,
    DocumentDetails,
    DocumentRecord,
    DocumentSummary,
    PartyInfo,
    ReceiverInfo,
)

_NULL_STRINGS = frozenset({"", "null", "none", "unknown", "n/a", "na"})
_AMOUNT_TOKEN_RE = re.compile(r"[-+]?\d[\d.,]*")
_WELL_FORMED_AMOUNT_RE = re.compile(r"[-+]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?")


def build_document_summary(data: dict[str, Any]) -> DocumentSummary:
    """Build the single-document result. Every field is optional."""
    return DocumentSummary(
        sender=_build_sender(data.get("sender")),
        receiver=_build_receiver(data.get("receiver")),
        document_details=_build_details(data.get("documentDetails")),
    )


def build_analysis_result(data: dict[str, Any]) -> AnalysisResult:
    """Build the multi-document result.

    Raises:
        InvalidStructureError: if ``totalPages`` or a non-empty ``documents``
                               list is missing, or a document lacks page numbers.
    """
    total_pages = _require_page_number(data, "totalPages", "totalPages")
    raw_documents = _require_non_empty_list(data, "documents")
    documents = [_build_record(item, i) for i, item in enumerate(raw_documents)]
    unique_pages = _optional_int(data.get("uniquePages"))
    return AnalysisResult(
        total_pages=total_pages,
        documents=documents,
        unique_pages=unique_pages,
    )


def build_boundary_result(data: dict[str, Any]) -> BoundaryResult:
    """Build the boundary-only result.

    Raises:
        InvalidStructureError: if ``totalPages``, ``totalDocuments`` or a
                               non-empty ``documentBoundaries`` list is missing.
    """
    total_pages = _require_page_number(data, "totalPages", "totalPages")
    total_documents = _require_page_number(data, "totalDocuments", "totalDocuments")
    raw_boundaries = _require_non_empty_list(data, "documentBoundaries")
    boundaries: list[DocumentBoundary] = []
    for i, item in enumerate(raw_boundaries):
        if not isinstance(item, dict):
            raise InvalidStructureError(f"Boundary at index {i} must be an object")
        start_page = _require_page_number(item, "startPage", f"documentBoundaries[{i}].startPage")
        number = _optional_int(item.get("documentNumber"))
        boundaries.append(
            DocumentBoundary(document_number=number or i + 1, start_page=start_page)
        )
    return BoundaryResult(
        total_pages=total_pages,
        total_documents=total_documents,
        document_boundaries=boundaries,
    )


def _require_non_empty_list(data: dict[str, Any], key: str) -> list[Any]:
    if key not in data or data[key] is None:
        raise InvalidStructureError(f"Missing required field: {key}")
    value = data[key]
    if not isinstance(value, list):
        raise InvalidStructureError(f"'{key}' must be a list")
    if not value:
        raise InvalidStructureError(f"'{key}' must not be empty")
    return value


def _require_page_number(data: dict[str, Any], key: str, label: str) -> int:
    if key not in data or data[key] is None:
        raise InvalidStructureError(f"Missing required field: {label}")
    number = _optional_int(data[key])
    if number is None:
        raise InvalidStructureError(f"'{label}' must be an integer, got {data[key]!r}")
    return number


def _build_record(raw: Any, index: int) -> DocumentRecord:
    if not isinstance(raw, dict):
        raise InvalidStructureError(f"Document at index {index} must be an object")
    start_page = _require_page_number(raw, "startPage", f"documents[{index}].startPage")
    end_page = _require_page_number(raw, "endPage", f"documents[{index}].endPage")
    return DocumentRecord(
        start_page=start_page,
        end_page=end_page,
        sender=_build_sender(raw.get("sender")),
        receiver=_build_receiver(raw.get("receiver")),
        document_details=_build_details(raw.get("documentDetails")),
    )


def _build_sender(raw: Any) -> PartyInfo:
    section = raw if isinstance(raw, dict) else {}
    return PartyInfo(
        name=_optional_str(section.get("name")),
        address=_optional_str(section.get("address")),
        company_number=_optional_str(section.get("companyNumber")),
        email=_optional_str(section.get("email")),
        phone=_optional_str(section.get("phone")),
    )


def _build_receiver(raw: Any) -> ReceiverInfo:
    section = raw if isinstance(raw, dict) else {}
    return ReceiverInfo(
        name=_optional_str(section.get("name")),
        address=_optional_str(section.get("address")),
    )


def _build_details(raw: Any) -> DocumentDetails:
    section = raw if isinstance(raw, dict) else {}
    return DocumentDetails(
        case_number=_optional_str(section.get("caseNumber")),
        invoice_amount=_optional_amount(section.get("invoiceAmount")),
        due_date=_optional_str(section.get("dueDate")),
        date_created=_optional_str(section.get("dateCreated")),
        date_sent=_optional_str(section.get("dateSent")),
        summary=_optional_str(section.get("summary")),
        document_type=_optional_str(section.get("documentType")),
    )


def _optional_str(raw: Any) -> str | None:
    if raw is None or isinstance(raw, (dict, list)):
        return None
    text = str(raw).strip()
    if text.lower() in _NULL_STRINGS:
        return None
    return text


def _optional_amount(raw: Any) -> float | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if not isinstance(raw, str):
        return None
    # exactly one number, with optional comma thousands separators
    tokens = [t.rstrip(".,") for t in _AMOUNT_TOKEN_RE.findall(raw)]
    if len(tokens) != 1 or not _WELL_FORMED_AMOUNT_RE.fullmatch(tokens[0]):
        return None
    return float(tokens[0].replace(",", ""))


def _optional_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
        return int(raw.strip())
    return None
