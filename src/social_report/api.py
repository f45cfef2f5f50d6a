"""FastAPI application for the social report normalizer."""

import uuid
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import (
    FastAPI,
    File,
    HTTPException,
    Query,
    Request,
    Response,
    UploadFile,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from social_report.config import settings, validate_settings_on_startup
from social_report.models import (
    DashboardFilters,
    DashboardResponse,
    ErrorDetail,
    HealthResponse,
    ReportingResponse,
)
from social_report.services.dashboard_builder import (
    available_platforms,
    available_profiles,
    filter_sheet_rows,
)
from social_report.services.pipeline import WorkbookPipeline
from social_report.utils.exceptions import (
    ErrorCode,
    FileError,
    FileTooLargeError,
    SRError,
    ValidationError,
)
from social_report.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from social_report.workbook import Platform, serialize_cell

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
UPLOAD_CHUNK_SIZE = 1024 * 1024

configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)


async def _read_upload(file: UploadFile, request_id: str | None) -> bytes:
    """Read an upload chunk by chunk, stopping once it exceeds the size limit.

    Raises:
        ValidationError: If no file was provided.
        FileTooLargeError: If the upload exceeds the configured limit.
        FileError: If the upload stream cannot be read.
    """
    if file.filename is None or file.filename == "":
        logger.warning("Request missing workbook file", request_id=request_id)
        raise ValidationError(
            message="An Excel workbook must be provided",
            field="file",
        )

    max_size = settings.max_file_size_bytes
    chunks: list[bytes] = []
    size = 0
    try:
        while True:
            chunk = await file.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_size:
                raise FileTooLargeError(
                    file_size=size, max_size=max_size, filename=file.filename
                )
            chunks.append(chunk)
    except OSError as e:
        logger.warning(
            "Upload could not be read",
            filename=file.filename,
            error=str(e),
            request_id=request_id,
        )
        raise FileError(
            message=f"Could not read the uploaded file: {e}",
            filename=file.filename,
        ) from e
    return b"".join(chunks)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    pipeline = WorkbookPipeline(settings)

    app = FastAPI(
        title="Social Report Normalizer API",
        description=(
            "Detects tables in social-media analytics workbooks, normalizes "
            "their columns and builds dashboard and reporting datasets."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    validate_settings_on_startup(settings)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Assign a request ID, expose it in context and response headers."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(SRError)
    async def sr_exception_handler(request: Request, exc: SRError) -> JSONResponse:
        """Return structured error responses for application exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.error(
            f"SR Error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail.from_error_code(
                exc.error_code,
                exc.message,
                details=exc.details or None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
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
        """Catch-all handler; hides internals unless debug is enabled."""
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
            content=ErrorDetail.from_error_code(
                ErrorCode.INTERNAL_ERROR, detail, request_id=request_id
            ).model_dump(exclude_none=True),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": "0.1.0",
        }

    @app.post(
        "/dashboard",
        response_model=DashboardResponse,
        tags=["Dashboard"],
        responses={
            400: {"model": ErrorDetail, "description": "Invalid request"},
            413: {"model": ErrorDetail, "description": "File too large"},
            422: {"model": ErrorDetail, "description": "Unreadable workbook"},
        },
    )
    async def build_dashboard(
        request: Request,
        file: Annotated[UploadFile, File(description="Analytics workbook (.xlsx)")],
        platform: Annotated[str, Query(description="Platform filter")] = "all",
        profile: Annotated[str, Query(description="Profile filter")] = "all",
    ) -> dict[str, Any]:
        """Build the dashboard model for an uploaded workbook.

        Returns the sheets with data, the five chart sections and the sheet
        rows narrowed to the requested platform and profile.
        """
        request_id = getattr(request.state, "request_id", None)
        valid_platforms = {"all"} | {p.value for p in Platform}
        if platform not in valid_platforms:
            raise ValidationError(
                message=f"Unknown platform filter: {platform}",
                field="platform",
                details={"allowed": sorted(valid_platforms)},
            )

        content = await _read_upload(file, request_id)
        filename = file.filename or "workbook.xlsx"
        model = pipeline.build_dashboard(content, filename)
        payload = model.to_dict()

        rows = {
            sheet: [
                {key: serialize_cell(value) for key, value in row.items()}
                for row in sheet_rows
            ]
            for sheet, sheet_rows in filter_sheet_rows(
                model, platform=platform, profile=profile
            ).items()
        }
        logger.info(
            "Dashboard built",
            filename=filename,
            sheets=len(model.sheets),
            request_id=request_id,
        )
        return {
            "filename": filename,
            "sheets": payload["sheets"],
            "sections": payload["sections"],
            "rows": rows,
            "filters": DashboardFilters(
                platform=platform,
                profile=profile,
                available_platforms=[p.value for p in available_platforms(model)],
                available_profiles=available_profiles(
                    model, limit=settings.max_profile_options
                ),
            ),
        }

    @app.post(
        "/reporting",
        response_model=ReportingResponse,
        tags=["Reporting"],
        responses={
            400: {"model": ErrorDetail, "description": "Invalid request"},
            413: {"model": ErrorDetail, "description": "File too large"},
            422: {"model": ErrorDetail, "description": "Unreadable workbook"},
        },
    )
    async def build_reporting(
        request: Request,
        file: Annotated[UploadFile, File(description="Analytics workbook (.xlsx)")],
    ) -> dict[str, Any]:
        """Return the five merged reporting tabs as JSON."""
        request_id = getattr(request.state, "request_id", None)
        content = await _read_upload(file, request_id)
        filename = file.filename or "workbook.xlsx"
        dataset = pipeline.build_reporting(content, filename)
        return {"filename": filename, "tabs": dataset.to_dict()}

    @app.post(
        "/normalize",
        response_model=ReportingResponse,
        tags=["Reporting"],
        responses={
            400: {"model": ErrorDetail, "description": "Invalid request"},
            413: {"model": ErrorDetail, "description": "File too large"},
            422: {"model": ErrorDetail, "description": "Unreadable workbook"},
        },
    )
    async def normalize_workbook(
        request: Request,
        file: Annotated[UploadFile, File(description="Analytics workbook (.xlsx)")],
    ) -> dict[str, Any]:
        """Return the detected tables merged per metric type.

        Columns keep their normalized source names instead of the fixed
        publish columns.
        """
        request_id = getattr(request.state, "request_id", None)
        content = await _read_upload(file, request_id)
        filename = file.filename or "workbook.xlsx"
        dataset = pipeline.normalize(content, filename)
        return {"filename": filename, "tabs": dataset.to_dict()}

    @app.post(
        "/reporting/export",
        tags=["Reporting"],
        response_class=Response,
        responses={
            200: {"content": {XLSX_MEDIA_TYPE: {}}},
            400: {"model": ErrorDetail, "description": "Invalid request"},
            422: {"model": ErrorDetail, "description": "Unreadable workbook"},
            502: {"model": ErrorDetail, "description": "Publishing failed"},
        },
    )
    async def export_reporting(
        request: Request,
        file: Annotated[UploadFile, File(description="Analytics workbook (.xlsx)")],
    ) -> Response:
        """Publish the reporting tabs into a new .xlsx workbook."""
        request_id = getattr(request.state, "request_id", None)
        content = await _read_upload(file, request_id)
        filename = file.filename or "workbook.xlsx"
        report, workbook_bytes = pipeline.export_reporting(content, filename)
        logger.info(
            "Reporting workbook exported",
            report_id=report.report_id,
            size=len(workbook_bytes),
            request_id=request_id,
        )
        return Response(
            content=workbook_bytes,
            media_type=XLSX_MEDIA_TYPE,
            headers={
                "Content-Disposition": (
                    f'attachment; filename="{report.title}.xlsx"'
                ),
                "X-Report-ID": report.report_id,
            },
        )

    return app


app = create_app()
