"""Spreadsheet JSON Extractor - Excel and CSV files to JSON records."""

from spreadsheet_json_extractor.api import app, create_app

__all__ = ["app", "create_app"]
__version__ = "0.1.0"


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from spreadsheet_json_extractor.config import settings

    uvicorn.run(
        "spreadsheet_json_extractor.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
