from dataclasses import dataclass
from enum import Enum

from app.extraction.models import PDF_MEDIA_TYPE


class AnalysisMode(str, Enum):
    SINGLE_DOCUMENT = "single_document"
    MULTI_DOCUMENT = "multi_document"
    PAGE_BOUNDARIES = "page_boundaries"


@dataclass(frozen=True)
class ModeProfile:
    """Per-mode pipeline parameters."""

    mode: AnalysisMode
    prompt_name: str
    page_breaks: bool = False
    accepted_media_types: frozenset[str] | None = None


PROFILES: dict[AnalysisMode, ModeProfile] = {
    AnalysisMode.SINGLE_DOCUMENT: ModeProfile(
        mode=AnalysisMode.SINGLE_DOCUMENT,
        prompt_name="single_document_prompt",
    ),
    AnalysisMode.MULTI_DOCUMENT: ModeProfile(
        mode=AnalysisMode.MULTI_DOCUMENT,
        prompt_name="multi_document_prompt",
    ),
    AnalysisMode.PAGE_BOUNDARIES: ModeProfile(
        mode=AnalysisMode.PAGE_BOUNDARIES,
        prompt_name="page_boundaries_prompt",
        page_breaks=True,
        accepted_media_types=frozenset({PDF_MEDIA_TYPE}),
    ),
}
