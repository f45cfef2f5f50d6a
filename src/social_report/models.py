"""Pydantic models for API responses."""

from typing import Any

from pydantic import BaseModel, Field

from social_report.utils.exceptions import ErrorCode


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


class DashboardFilters(BaseModel):
    """Filter values applied to the dashboard rows and the options offered."""

    platform: str = Field(default="all", description="Applied platform filter")
    profile: str = Field(default="all", description="Applied profile filter")
    available_platforms: list[str] = Field(
        default_factory=list, description="Platforms present in the workbook"
    )
    available_profiles: list[str] = Field(
        default_factory=list, description="Profile names present in the workbook"
    )


class DashboardResponse(BaseModel):
    """Response model for the dashboard endpoint."""

    filename: str = Field(..., description="Original filename of the workbook")
    sheets: list[dict[str, Any]] = Field(
        ..., description="Sheets with at least one row and their column metadata"
    )
    sections: list[dict[str, Any]] = Field(
        ..., description="The five dashboard sections with chart bindings"
    )
    rows: dict[str, list[dict[str, Any]]] = Field(
        ..., description="Filtered rows per sheet, prefixed with a Platform label"
    )
    filters: DashboardFilters


class ReportingResponse(BaseModel):
    """Response model for the reporting dataset endpoint."""

    filename: str = Field(..., description="Original filename of the workbook")
    tabs: dict[str, dict[str, Any]] = Field(
        ..., description="Merged table per report tab (overview ... engagement)"
    )


class ErrorDetail(BaseModel):
    """Error detail model for API error responses.

    This model provides structured error responses with:
    - Human-readable error message
    - Machine-readable error code
    - Optional additional details for debugging
    - Optional request ID for correlation
    """

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E1005')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        detail: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ErrorCode enum value."""
        return cls(
            detail=detail,
            error_code=error_code.value,
            details=details,
            request_id=request_id,
        )
