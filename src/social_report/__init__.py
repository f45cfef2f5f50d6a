"""Social Report Normalizer - table detection and column normalization for
social-media analytics workbooks."""

from social_report.api import app, create_app

__all__ = ["app", "create_app"]
__version__ = "0.1.0"


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from social_report.config import settings

    uvicorn.run(
        "social_report.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
