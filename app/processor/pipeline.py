from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from app.extraction.models import ExtractionResult, UploadedFile
from app.processor.modes import AnalysisMode


@dataclass(slots=True)
class PipelineContext:
    mode: AnalysisMode
    upload: UploadedFile
    extraction: ExtractionResult | None = None
    raw_response: str = ""
    parsed: dict[str, Any] = field(default_factory=dict)
    payload: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class ProcessingOutcome:
    """What a request handler needs to build the response envelope."""

    file_type: str
    num_pages: int
    payload: dict[str, object]


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__
