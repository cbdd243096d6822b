from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.analysis.exceptions import (
    AnalysisError,
    InvalidStructureError,
    MalformedResponseError,
    UpstreamUnavailableError,
)
from app.api.exceptions import ApiError
from app.config.settings import Settings
from app.extraction.exceptions import ExtractionError
from app.logging.logger import Log
from app.pdf.exceptions import PdfExtractionError

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


def error_response(status_code: int, error: str, **details: object) -> JSONResponse:
    body: dict[str, object] = {"error": error}
    body.update({key: value for key, value in details.items() if value is not None})
    return JSONResponse(status_code=status_code, content=body, headers=CORS_HEADERS)


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        Log.error(f"Request failed: {exc}", path=request.url.path)
    message = exc.message if exc.message and exc.message != exc.error else None
    if exc.status_code == 400 and message:
        return error_response(exc.status_code, message)
    return error_response(exc.status_code, exc.error, message=message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        return error_response(405, "Method not allowed")
    return error_response(exc.status_code, str(exc.detail))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, "Invalid request", details=str(exc.errors()))


async def handle_extraction_error(request: Request, exc: Exception) -> JSONResponse:
    return error_response(400, str(exc))


async def handle_pdf_error(request: Request, exc: Exception) -> JSONResponse:
    Log.error(f"PDF could not be read: {exc}", path=request.url.path)
    return error_response(500, "Failed to process file", message=str(exc))


async def handle_malformed_response(request: Request, exc: MalformedResponseError) -> JSONResponse:
    settings: Settings = request.app.state.settings
    Log.error(f"Failed to parse analysis response: {exc}", path=request.url.path)
    return error_response(
        500,
        "Failed to parse analysis results",
        errorMessage=str(exc),
        rawResponse=exc.raw_response if settings.expose_raw_response else None,
    )


async def handle_invalid_structure(request: Request, exc: Exception) -> JSONResponse:
    Log.error(f"Invalid analysis structure: {exc}", path=request.url.path)
    return error_response(500, "Invalid analysis structure", details=str(exc))


async def handle_upstream_unavailable(request: Request, exc: Exception) -> JSONResponse:
    Log.error(f"Analysis service unavailable: {exc}", path=request.url.path)
    return error_response(500, "Analysis service unavailable", message=str(exc))


async def handle_analysis_error(request: Request, exc: Exception) -> JSONResponse:
    Log.error(f"Analysis failed: {exc}", path=request.url.path)
    return error_response(500, "Failed to process file", message=str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to the JSON error envelope."""
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(ExtractionError, handle_extraction_error)
    app.add_exception_handler(PdfExtractionError, handle_pdf_error)
    app.add_exception_handler(MalformedResponseError, handle_malformed_response)
    app.add_exception_handler(InvalidStructureError, handle_invalid_structure)
    app.add_exception_handler(UpstreamUnavailableError, handle_upstream_unavailable)
    app.add_exception_handler(AnalysisError, handle_analysis_error)
