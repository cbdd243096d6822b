from app.analysis.analyzer import Instruction, StructuredExtractionClient
from app.analysis.client_base import BaseAnalysisClient
from app.analysis.factory import AnalysisClientFactory
from app.analysis.prompt_loader import load_instruction
from app.analysis.reconciler import BoundaryReconciler
from app.analysis.serializer import ResultSerializer
from app.config.settings import Settings
from app.extraction.extractor import ContentExtractor
from app.extraction.image_compressor import ImageCompressor
from app.extraction.models import UploadedFile
from app.logging.logger import Log
from app.pdf.factory import PdfExtractorFactory
from app.processor.modes import PROFILES, AnalysisMode, ModeProfile
from app.processor.pipeline import PipelineContext, PipelineStep, ProcessingOutcome
from app.processor.steps import (
    AnalyzeStep,
    BuildSummaryStep,
    ExtractContentStep,
    ParseResponseStep,
    ReconcileBoundariesStep,
    ReconcileDocumentsStep,
)


class DocumentProcessor:
    """Runs one upload through extract -> analyze -> parse -> build/reconcile."""

    def __init__(self, mode: AnalysisMode, steps: list[PipelineStep]) -> None:
        self._mode = mode
        self._steps = steps

    @property
    def mode(self) -> AnalysisMode:
        return self._mode

    async def process(self, upload: UploadedFile) -> ProcessingOutcome:
        """Run every step in order. Step errors are logged and re-raised."""
        Log.info(
            "Processing upload",
            mode=self._mode.value,
            file_type=upload.media_type,
            size=len(upload.content),
        )
        context = PipelineContext(mode=self._mode, upload=upload)
        for step in self._steps:
            try:
                context = await step.run(context)
            except Exception as exc:
                Log.error(f"Step {step.name} failed: {exc}", mode=self._mode.value)
                raise
        if context.extraction is None:
            raise ValueError("Pipeline finished without an extraction result")
        return ProcessingOutcome(
            file_type=upload.media_type,
            num_pages=context.extraction.page_count,
            payload=context.payload,
        )


def build_steps(
    profile: ModeProfile,
    extractor: ContentExtractor,
    analyzer: StructuredExtractionClient,
    reconciler: BoundaryReconciler,
) -> list[PipelineStep]:
    """Assemble the step list for a mode."""
    instruction = Instruction(
        name=profile.prompt_name,
        system_prompt=load_instruction(profile.prompt_name),
        page_breaks=profile.page_breaks,
    )
    serializer = ResultSerializer()
    steps: list[PipelineStep] = [
        ExtractContentStep(extractor, profile.accepted_media_types),
        AnalyzeStep(analyzer, instruction),
        ParseResponseStep(),
    ]
    if profile.mode is AnalysisMode.SINGLE_DOCUMENT:
        steps.append(BuildSummaryStep(serializer))
    elif profile.mode is AnalysisMode.MULTI_DOCUMENT:
        steps.append(ReconcileDocumentsStep(reconciler, serializer))
    else:
        steps.append(ReconcileBoundariesStep(reconciler, serializer))
    return steps


def build_processors(
    settings: Settings,
    client: BaseAnalysisClient | None = None,
) -> dict[AnalysisMode, DocumentProcessor]:
    """Build one processor per mode, sharing extractor, analyzer and reconciler.

    ``client`` replaces the provider client from settings, e.g. with a test double.
    """
    extractor = ContentExtractor(
        pdf_extractor=PdfExtractorFactory.create(settings),
        image_compressor=ImageCompressor(
            max_edge_px=settings.image_max_edge_px,
            jpeg_quality=settings.image_jpeg_quality,
        ),
        min_text_chars=settings.native_text_min_chars,
    )
    analyzer = AnalysisClientFactory.create_structured_client(settings, client)
    reconciler = BoundaryReconciler.from_name(settings.boundary_policy)
    return {
        mode: DocumentProcessor(mode, build_steps(profile, extractor, analyzer, reconciler))
        for mode, profile in PROFILES.items()
    }
