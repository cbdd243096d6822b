import asyncio
from collections.abc import Collection

from app.analysis.analyzer import Instruction, StructuredExtractionClient
from app.analysis.reconciler import BoundaryReconciler
from app.analysis.sanitizer import parse_structured
from app.analysis.serializer import ResultSerializer
from app.analysis.validator import build_document_summary
from app.extraction.extractor import ContentExtractor
from app.extraction.models import ExtractionResult
from app.logging.logger import Log
from app.processor.pipeline import PipelineContext, PipelineStep


def _require_extraction(context: PipelineContext, step: str) -> ExtractionResult:
    if context.extraction is None:
        raise ValueError(f"PipelineContext.extraction must be set before {step}")
    return context.extraction


class ExtractContentStep(PipelineStep):
    def __init__(
        self,
        extractor: ContentExtractor,
        accepted_media_types: Collection[str] | None = None,
    ) -> None:
        self._extractor = extractor
        self._accepted = accepted_media_types

    async def run(self, context: PipelineContext) -> PipelineContext:
        context.extraction = await asyncio.to_thread(
            self._extractor.extract, context.upload, self._accepted
        )
        Log.info(
            "Content extracted",
            mode=context.extraction.mode.value,
            pages=context.extraction.page_count,
        )
        return context


class AnalyzeStep(PipelineStep):
    def __init__(self, analyzer: StructuredExtractionClient, instruction: Instruction) -> None:
        self._analyzer = analyzer
        self._instruction = instruction

    async def run(self, context: PipelineContext) -> PipelineContext:
        extraction = _require_extraction(context, "analysis")
        context.raw_response = await self._analyzer.analyze(extraction, self._instruction)
        return context


class ParseResponseStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        context.parsed = parse_structured(context.raw_response)
        return context


class BuildSummaryStep(PipelineStep):
    def __init__(self, serializer: ResultSerializer) -> None:
        self._serializer = serializer

    async def run(self, context: PipelineContext) -> PipelineContext:
        summary = build_document_summary(context.parsed)
        context.payload = self._serializer.summary(summary)
        return context


class ReconcileDocumentsStep(PipelineStep):
    def __init__(self, reconciler: BoundaryReconciler, serializer: ResultSerializer) -> None:
        self._reconciler = reconciler
        self._serializer = serializer

    async def run(self, context: PipelineContext) -> PipelineContext:
        extraction = _require_extraction(context, "reconciliation")
        result = self._reconciler.reconcile(context.parsed, extraction.page_count)
        context.payload = self._serializer.analysis(result)
        return context


class ReconcileBoundariesStep(PipelineStep):
    def __init__(self, reconciler: BoundaryReconciler, serializer: ResultSerializer) -> None:
        self._reconciler = reconciler
        self._serializer = serializer

    async def run(self, context: PipelineContext) -> PipelineContext:
        extraction = _require_extraction(context, "reconciliation")
        result = self._reconciler.reconcile_boundaries(context.parsed, extraction.page_count)
        context.payload = self._serializer.boundaries(result)
        return context
