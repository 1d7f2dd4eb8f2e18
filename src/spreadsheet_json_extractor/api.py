"""FastAPI application for spreadsheet to JSON conversion."""

import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Any

from fastapi import (
    FastAPI,
    File,
    Form,
    HTTPException,
    Request,
    Response,
    UploadFile,
    status,
)
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from spreadsheet_json_extractor.config import settings, validate_settings_on_startup
from spreadsheet_json_extractor.models import (
    ConversionResult,
    ErrorDetail,
    HealthResponse,
)
from spreadsheet_json_extractor.output.json_export import (
    JSON_MEDIA_TYPE,
    JsonExporter,
    content_disposition,
)
from spreadsheet_json_extractor.presentation.state import (
    InvalidTransitionError,
    UiState,
    begin_processing,
    select_file,
    select_sheet,
    settle,
    toggle_raw_json,
)
from spreadsheet_json_extractor.presentation.view import build_page_view
from spreadsheet_json_extractor.services.conversion_service import ConversionService
from spreadsheet_json_extractor.services.format_detector import FormatDetector
from spreadsheet_json_extractor.utils.exceptions import ErrorCode
from spreadsheet_json_extractor.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
ERROR_CODE_HEADER = "X-Error-Code"

UploadField = Annotated[
    UploadFile | None, File(description="Spreadsheet file (.xlsx, .xls or .csv)")
]


async def read_upload(
    file: UploadFile | None,
) -> tuple[bytes | None, str | None, str | None]:
    """Read an uploaded file into content, file name and declared type.

    A form part without a file name and without content counts as no file.
    """
    if file is None:
        return None, None, None
    content = await file.read()
    if not file.filename and not content:
        return None, None, None
    return content, file.filename, file.content_type


def error_code_headers(result: ConversionResult) -> dict[str, str]:
    if result.error_code is None:
        return {}
    return {ERROR_CODE_HEADER: result.error_code.value}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Spreadsheet JSON Extractor",
        description=(
            "Upload an Excel workbook (.xlsx, .xls) or CSV file and get every "
            "sheet back as JSON records keyed by column header."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Configure CORS using settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", ERROR_CODE_HEADER],
    )

    # Validate settings on startup
    validate_settings_on_startup(settings)

    app.state.conversion_service = ConversionService.from_settings(settings)
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    exporter = JsonExporter()
    accept = ",".join(FormatDetector.get_accepted_extensions())

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Assign a request ID, expose it in logs and the response headers."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all exception handler for unexpected errors.

        Logs the full exception and returns a generic error response
        to avoid leaking internal details.
        """
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail(
                detail=detail,
                error_code=ErrorCode.INTERNAL_ERROR.value,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    async def convert_upload(request: Request, file: UploadFile | None) -> ConversionResult:
        content, file_name, content_type = await read_upload(file)
        service: ConversionService = request.app.state.conversion_service
        return await run_in_threadpool(service.convert, content, file_name, content_type)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> dict[str, Any]:
        """Check the health status of the service.

        Returns:
            HealthResponse: Service status information including status,
                timestamp, and version.
        """
        request_id = getattr(request.state, "request_id", None)
        logger.debug("Health check requested", request_id=request_id)
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": "0.1.0",
        }

    @app.get("/", response_class=HTMLResponse, tags=["Page"])
    async def upload_page(request: Request) -> HTMLResponse:
        """Render the upload page with no file selected."""
        view = build_page_view(UiState())
        return templates.TemplateResponse(
            request, "index.html", {"view": view, "accept": accept}
        )

    @app.post("/", response_class=HTMLResponse, tags=["Page"])
    async def submit_upload_page(
        request: Request,
        file: UploadField = None,
        sheet: Annotated[str | None, Form(description="Sheet to show first")] = None,
        show_raw_json: Annotated[bool, Form(description="Expand the raw JSON")] = False,
    ) -> HTMLResponse:
        """Convert the submitted file and render the page with its outcome.

        Failures of the conversion call itself are shown as a failed result
        rather than an error page.
        """
        file_name = (file.filename if file is not None else None) or ""
        state = begin_processing(select_file(UiState(), file_name))

        try:
            result = await convert_upload(request, file)
        except Exception:
            logger.exception("Conversion call failed", file_name=file_name)
            result = ConversionResult.failed(UNEXPECTED_ERROR_MESSAGE, file_name=file_name)

        state = settle(state, result)
        if sheet:
            try:
                state = select_sheet(state, sheet)
            except (InvalidTransitionError, KeyError):
                logger.debug("Ignoring unknown sheet selection", sheet=sheet)
        if show_raw_json and result.success:
            state = toggle_raw_json(state)

        view = build_page_view(state)
        return templates.TemplateResponse(
            request,
            "index.html",
            {"view": view, "accept": accept},
            headers=error_code_headers(result),
        )

    @app.post(
        "/api/convert",
        response_model=ConversionResult,
        tags=["Conversion"],
        responses={
            200: {"description": "Conversion outcome, failures included"},
        },
    )
    async def convert_file(request: Request, file: UploadField = None) -> Response:
        """Convert a spreadsheet to JSON.

        Always answers 200: a failed conversion is reported in the body with
        ``success=false`` and its error code in the ``X-Error-Code`` header.
        """
        result = await convert_upload(request, file)
        return JSONResponse(
            content=result.to_json_dict(),
            headers=error_code_headers(result),
        )

    @app.post(
        "/api/convert/download",
        tags=["Conversion"],
        response_class=Response,
        responses={
            200: {
                "content": {JSON_MEDIA_TYPE: {}},
                "description": "Conversion outcome as a JSON attachment",
            },
        },
    )
    async def download_json(request: Request, file: UploadField = None) -> Response:
        """Convert a spreadsheet and return the JSON as a file download."""
        result = await convert_upload(request, file)
        export = exporter.export(result)
        logger.info(
            "Serving JSON download",
            download_name=export.file_name,
            size_bytes=len(export.content),
        )
        return Response(
            content=export.content,
            media_type=JSON_MEDIA_TYPE,
            headers={
                "Content-Disposition": content_disposition(export.file_name),
                **error_code_headers(result),
            },
        )

    logger.info("FastAPI application created successfully")
    return app


# Create the application instance
app = create_app()
