"""Output generation for conversion results.

This module provides the JSON document offered for download, its file name
and schema validation of the exported document.
"""

from spreadsheet_json_extractor.output.json_export import (
    RESULT_SCHEMA,
    JsonExport,
    JsonExporter,
    content_disposition,
    download_file_name,
    to_json_text,
)

__all__ = [
    "RESULT_SCHEMA",
    "JsonExport",
    "JsonExporter",
    "content_disposition",
    "download_file_name",
    "to_json_text",
]
