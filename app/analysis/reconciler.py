"""Page accounting for multi-document results.

The model's own page count is never trusted: ``total_pages`` is always
replaced with the count measured from the uploaded file. What happens to the
per-document page ranges depends on the boundary policy:

* ``trust``  - ranges are passed through as the model returned them.
* ``strict`` - ranges must partition ``[1, total_pages]`` in order, otherwise
  the result is rejected.
* ``repair`` - ranges are rebuilt from the sorted start pages so that they
  partition ``[1, total_pages]``. A gap is absorbed by the document before
  it. Rejected only when there are more documents than pages.
"""

from dataclasses import replace
from enum import Enum
from typing import Any

from app.analysis.exceptions import InvalidStructureError
from app.analysis.models import (
    AnalysisResult,
    BoundaryResult,
    DocumentBoundary,
    DocumentRecord,
)
from app.analysis.validator import build_analysis_result, build_boundary_result
from app.logging.logger import Log

PageRange = tuple[int, int]


class BoundaryPolicy(str, Enum):
    TRUST = "trust"
    STRICT = "strict"
    REPAIR = "repair"


def validate_partition(ranges: list[PageRange], total_pages: int) -> None:
    """Check that ranges, in the given order, cover every page exactly once.

    Raises:
        InvalidStructureError: describing the first violation found.
    """
    expected_start = 1
    for index, (start, end) in enumerate(ranges):
        if start > end:
            raise InvalidStructureError(
                f"Document {index + 1}: startPage {start} is after endPage {end}"
            )
        if start < expected_start:
            raise InvalidStructureError(
                f"Document {index + 1}: pages {start}-{end} overlap the previous document"
            )
        if start > expected_start:
            raise InvalidStructureError(
                f"Document {index + 1}: pages {expected_start}-{start - 1} "
                "are not assigned to any document"
            )
        expected_start = end + 1
    if expected_start != total_pages + 1:
        raise InvalidStructureError(
            f"Documents cover pages 1-{expected_start - 1} but the file has "
            f"{total_pages} pages"
        )


def repair_partition(
    ranges: list[PageRange], total_pages: int
) -> tuple[list[int], list[PageRange]]:
    """Rebuild ranges so they partition ``[1, total_pages]``.

    Returns:
        The original indices in page order, and the repaired range for each
        of them in that same order.

    Raises:
        InvalidStructureError: if there are more documents than pages.
    """
    if len(ranges) > total_pages:
        raise InvalidStructureError(
            f"{len(ranges)} documents cannot be placed on {total_pages} pages"
        )
    order = sorted(range(len(ranges)), key=lambda i: ranges[i])
    starts: list[int] = []
    previous = 0
    for position, index in enumerate(order):
        start = 1 if position == 0 else max(ranges[index][0], previous + 1)
        # leave one page for each remaining document
        start = min(start, total_pages - (len(order) - 1 - position))
        starts.append(start)
        previous = start
    ends = [next_start - 1 for next_start in starts[1:]] + [total_pages]
    return order, list(zip(starts, ends))


class BoundaryReconciler:
    """Forces ground-truth page counts onto parsed results."""

    def __init__(self, policy: BoundaryPolicy = BoundaryPolicy.REPAIR) -> None:
        self._policy = policy

    @classmethod
    def from_name(cls, name: str) -> "BoundaryReconciler":
        try:
            policy = BoundaryPolicy(name.strip().lower())
        except ValueError as exc:
            choices = [p.value for p in BoundaryPolicy]
            raise ValueError(
                f"Unknown boundary policy '{name}'. Choose from: {choices}"
            ) from exc
        return cls(policy)

    @property
    def policy(self) -> BoundaryPolicy:
        return self._policy

    def reconcile(self, data: dict[str, Any], ground_truth_page_count: int) -> AnalysisResult:
        """Validate a multi-document reply and apply ground-truth page accounting.

        Raises:
            InvalidStructureError: if required fields are missing, or the
                                   page ranges cannot satisfy the policy.
        """
        result = build_analysis_result(data)
        self._log_page_count_override(result.total_pages, ground_truth_page_count)
        documents = self._reconcile_documents(result.documents, ground_truth_page_count)
        Log.info(
            "Reconciled analysis result",
            documents=len(documents),
            total_pages=ground_truth_page_count,
            policy=self._policy.value,
        )
        return replace(result, total_pages=ground_truth_page_count, documents=documents)

    def reconcile_boundaries(
        self, data: dict[str, Any], ground_truth_page_count: int
    ) -> BoundaryResult:
        """Validate a boundary-only reply and apply ground-truth page accounting."""
        result = build_boundary_result(data)
        self._log_page_count_override(result.total_pages, ground_truth_page_count)
        if self._policy is BoundaryPolicy.TRUST:
            return replace(result, total_pages=ground_truth_page_count)

        ranges = [(b.start_page, b.start_page) for b in result.document_boundaries]
        if self._policy is BoundaryPolicy.STRICT:
            self._validate_starts([start for start, _ in ranges], ground_truth_page_count)
            boundaries = result.document_boundaries
        else:
            _order, repaired = repair_partition(ranges, ground_truth_page_count)
            boundaries = [
                DocumentBoundary(document_number=number, start_page=start)
                for number, (start, _end) in enumerate(repaired, start=1)
            ]
            self._log_boundary_repairs(result.document_boundaries, boundaries)
        return BoundaryResult(
            total_pages=ground_truth_page_count,
            total_documents=len(boundaries),
            document_boundaries=boundaries,
        )

    def _reconcile_documents(
        self, documents: list[DocumentRecord], total_pages: int
    ) -> list[DocumentRecord]:
        ranges = [(doc.start_page, doc.end_page) for doc in documents]
        if self._policy is BoundaryPolicy.TRUST:
            return documents
        if self._policy is BoundaryPolicy.STRICT:
            validate_partition(ranges, total_pages)
            return documents

        order, repaired = repair_partition(ranges, total_pages)
        reconciled: list[DocumentRecord] = []
        for index, (start, end) in zip(order, repaired):
            document = documents[index]
            if (start, end) != ranges[index]:
                Log.warning(
                    f"Repaired page range of document {index + 1}: "
                    f"{ranges[index][0]}-{ranges[index][1]} -> {start}-{end}"
                )
            reconciled.append(replace(document, start_page=start, end_page=end))
        return reconciled

    @staticmethod
    def _validate_starts(starts: list[int], total_pages: int) -> None:
        if starts[0] != 1:
            raise InvalidStructureError(f"First document starts on page {starts[0]}, not 1")
        for previous, current in zip(starts, starts[1:]):
            if current <= previous:
                raise InvalidStructureError(
                    f"Start page {current} does not follow start page {previous}"
                )
        if starts[-1] > total_pages:
            raise InvalidStructureError(
                f"Start page {starts[-1]} is beyond the last page ({total_pages})"
            )

    @staticmethod
    def _log_page_count_override(claimed: int, actual: int) -> None:
        if claimed != actual:
            Log.warning(
                f"Model reported {claimed} pages, file has {actual}; using the file count"
            )

    @staticmethod
    def _log_boundary_repairs(
        before: list[DocumentBoundary], after: list[DocumentBoundary]
    ) -> None:
        original = sorted(b.start_page for b in before)
        repaired = [b.start_page for b in after]
        if original != repaired:
            Log.warning(f"Repaired document start pages: {original} -> {repaired}")
