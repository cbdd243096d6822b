from fastapi import APIRouter, Depends, File, Request, Response, UploadFile
from fastapi.responses import JSONResponse

from app.analysis.exceptions import AnalysisError
from app.api.auth import require_bearer_token
from app.api.cancellation import run_until_disconnected
from app.api.errors import CORS_HEADERS
from app.api.exceptions import ApiError, BadRequestError, ProcessingError
from app.config.settings import Settings
from app.extraction.exceptions import ExtractionError
from app.extraction.models import UploadedFile
from app.logging.logger import Log
from app.pdf.exceptions import PdfExtractionError
from app.processor.modes import AnalysisMode
from app.processor.pipeline import ProcessingOutcome
from app.processor.processor import DocumentProcessor

UPLOAD_PATHS = ("/analyze", "/process-document", "/upload", "/page-splitter")
PREFLIGHT_PATHS = ("/health", *UPLOAD_PATHS)

router = APIRouter()


async def read_upload(file: UploadFile | None, max_bytes: int) -> UploadedFile:
    """Read the ``file`` form part into memory.

    Raises:
        BadRequestError: if the part is missing, empty or larger than ``max_bytes``.
    """
    if file is None:
        raise BadRequestError("No file found in the request")
    content = await file.read(max_bytes + 1)
    if not content:
        raise BadRequestError("Uploaded file is empty")
    if len(content) > max_bytes:
        raise BadRequestError(f"File exceeds the {max_bytes} byte upload limit")
    media_type = (file.content_type or "").split(";")[0].strip().lower()
    return UploadedFile(content=content, media_type=media_type, filename=file.filename)


async def _process(
    request: Request,
    file: UploadFile | None,
    mode: AnalysisMode,
) -> ProcessingOutcome:
    settings: Settings = request.app.state.settings
    processor: DocumentProcessor = request.app.state.processors[mode]
    upload = await read_upload(file, settings.max_upload_bytes)
    try:
        return await run_until_disconnected(
            request,
            processor.process(upload),
            poll_seconds=settings.disconnect_poll_seconds,
        )
    except (ApiError, AnalysisError, ExtractionError, PdfExtractionError):
        raise
    except Exception as exc:
        Log.exception("Unexpected failure while processing upload", mode=mode.value)
        raise ProcessingError(str(exc)) from exc


def _envelope(outcome: ProcessingOutcome, key: str) -> JSONResponse:
    return JSONResponse(
        {
            "success": True,
            "fileType": outcome.file_type,
            "numPages": outcome.num_pages,
            key: outcome.payload,
        }
    )


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "OK"}


@router.post("/analyze", dependencies=[Depends(require_bearer_token)])
async def analyze_single_document(
    request: Request,
    file: UploadFile | None = File(default=None),
) -> JSONResponse:
    """Extract sender, receiver and details of a single document."""
    outcome = await _process(request, file, AnalysisMode.SINGLE_DOCUMENT)
    return _envelope(outcome, "data")


@router.post("/process-document", dependencies=[Depends(require_bearer_token)])
@router.post("/upload", dependencies=[Depends(require_bearer_token)])
async def analyze_multiple_documents(
    request: Request,
    file: UploadFile | None = File(default=None),
) -> JSONResponse:
    """Split an upload into logical documents and extract each one."""
    outcome = await _process(request, file, AnalysisMode.MULTI_DOCUMENT)
    return _envelope(outcome, "content")


@router.post("/page-splitter", dependencies=[Depends(require_bearer_token)])
async def split_pages(
    request: Request,
    file: UploadFile | None = File(default=None),
) -> JSONResponse:
    """Return only the page on which each document starts."""
    outcome = await _process(request, file, AnalysisMode.PAGE_BOUNDARIES)
    return JSONResponse(outcome.payload)


async def preflight() -> Response:
    return Response(status_code=204, headers=CORS_HEADERS)


for _path in PREFLIGHT_PATHS:
    router.add_api_route(_path, preflight, methods=["OPTIONS"], include_in_schema=False)
