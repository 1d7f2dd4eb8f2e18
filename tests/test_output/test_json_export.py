"""Tests for JSON export of conversion results."""

import json
from urllib.parse import unquote

import pytest

from spreadsheet_json_extractor.models import ConversionResult, SheetTable
from spreadsheet_json_extractor.output.json_export import (
    JsonExporter,
    content_disposition,
    download_file_name,
    to_json_text,
)


@pytest.fixture
def result() -> ConversionResult:
    sheet = SheetTable(
        sheet_name="Données",
        rows=[{"Nom": "Zoë", "Âge": 31}],
        headers=["Nom", "Âge"],
    )
    return ConversionResult.succeeded([sheet], "rapport.xlsx")


class TestToJsonText:
    """Tests for JSON text formatting."""

    def test_two_space_indentation(self, result: ConversionResult) -> None:
        text = to_json_text(result.to_json_dict())
        assert text.startswith('{\n  "success": true')
        assert '\n    {\n      "sheetName"' in text

    def test_non_ascii_kept(self, result: ConversionResult) -> None:
        text = to_json_text(result.to_json_dict())
        assert "Zoë" in text
        assert "\\u" not in text

    def test_parses_back_to_result_shape(self, result: ConversionResult) -> None:
        assert json.loads(to_json_text(result.to_json_dict())) == result.to_json_dict()


class TestDownloadFileName:
    """Tests for the download file name."""

    @pytest.mark.parametrize(
        ("file_name", "expected"),
        [
            ("report.xlsx", "report_extracted.json"),
            ("archive.tar.xlsx", "archive.tar_extracted.json"),
            ("data.CSV", "data_extracted.json"),
            ("no_extension", "no_extension_extracted.json"),
        ],
    )
    def test_strips_last_extension(self, file_name: str, expected: str) -> None:
        assert download_file_name(file_name) == expected

    def test_empty_name_gets_default_base(self) -> None:
        assert download_file_name("") == "data_extracted.json"


class TestContentDisposition:
    """Tests for the attachment header."""

    def test_ascii_name(self) -> None:
        assert (
            content_disposition("report_extracted.json")
            == 'attachment; filename="report_extracted.json"'
        )

    def test_non_ascii_name(self) -> None:
        header = content_disposition("Zoë_extracted.json")
        assert 'filename="Zo?_extracted.json"' in header
        encoded = header.split("filename*=UTF-8''", 1)[1]
        assert unquote(encoded) == "Zoë_extracted.json"


class TestJsonExporter:
    """Tests for JsonExporter."""

    def test_export(self, result: ConversionResult) -> None:
        export = JsonExporter().export(result)

        assert export.file_name == "rapport_extracted.json"
        assert export.errors == []
        assert export.text == to_json_text(result.to_json_dict())
        assert json.loads(export.content.decode("utf-8")) == result.to_json_dict()

    def test_data_uri(self, result: ConversionResult) -> None:
        export = JsonExporter().export(result)

        prefix = "data:application/json;charset=utf-8,"
        assert export.data_uri.startswith(prefix)
        assert unquote(export.data_uri[len(prefix) :]) == export.text

    def test_failed_result_is_valid(self) -> None:
        failed = ConversionResult.failed("No file provided")
        assert JsonExporter().validate(failed.to_json_dict()) == []

    def test_validate_reports_schema_violations(self) -> None:
        errors = JsonExporter().validate(
            {
                "success": "yes",
                "sheets": [{"sheetName": "S", "rows": [], "headers": ["a", "a"]}],
                "totalSheets": 1,
                "fileName": "x.xlsx",
            }
        )

        assert any(error.startswith("success:") for error in errors)
        assert any(error.startswith("sheets.0:") for error in errors)
        assert any(error.startswith("sheets.0.headers:") for error in errors)

    def test_validate_rejects_extra_keys(self, result: ConversionResult) -> None:
        document = {**result.to_json_dict(), "errorCode": "E1001"}
        errors = JsonExporter().validate(document)
        assert any("errorCode" in error for error in errors)
