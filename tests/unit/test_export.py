# =============================================================================
# tests/unit/test_export.py
# Unit Tests for CSV / Excel / PDF export
# =============================================================================

import io

import pandas as pd

from camp_core.data.export import (
    EXPORT_COLUMNS,
    ROLE_UNION_RESPONSIBLE,
    ROLE_WARD_RESPONSIBLE,
    ExportFormat,
    ExportPDF,
    ExportRow,
    ExportScope,
    export_filename,
    export_regions,
    flatten_regions,
    rows_to_dataframe,
    select_scope,
    to_csv_bytes,
    to_excel_bytes,
    to_pdf_bytes,
)


class TestFlatten:
    """One row per responsible person"""

    def test_rows(self, sample_regions):
        rows = flatten_regions(sample_regions)

        assert rows == [
            ExportRow("সাতকানিয়া পৌরসভা", "", "ওয়ার্ড-১", "রহিম", "01711-000001", ROLE_WARD_RESPONSIBLE),
            ExportRow("সাতকানিয়া উপজেলা", "কাঞ্চনা", "", "করিম", "01811 000002", ROLE_UNION_RESPONSIBLE),
            ExportRow("সাতকানিয়া উপজেলা", "কাঞ্চনা", "ওয়ার্ড-২", "সালমা", "+8801911000003", ROLE_WARD_RESPONSIBLE),
        ]

    def test_missing_phone_is_blank(self):
        from camp_core.models.entities import regions_from_payload

        regions = regions_from_payload([{
            "id": "r", "name": "R", "hasUnions": False,
            "wards": [{"id": "w", "name": "W", "persons": [{"id": "p", "name": "P"}]}],
        }])
        assert flatten_regions(regions)[0].phone == ""

    def test_empty_tree(self, seed_regions):
        assert flatten_regions(()) == []
        assert flatten_regions(seed_regions) == []

    def test_scope(self, sample_regions):
        filtered = sample_regions[:1]
        assert select_scope(ExportScope.ALL, sample_regions, filtered) is sample_regions
        assert select_scope(ExportScope.FILTERED, sample_regions, filtered) is filtered


class TestTabularFormats:
    """CSV and Excel output"""

    def test_dataframe_columns(self, sample_regions):
        df = rows_to_dataframe(flatten_regions(sample_regions))
        assert list(df.columns) == EXPORT_COLUMNS
        assert len(df) == 3

    def test_csv_has_bom_and_bangla(self, sample_regions):
        data = to_csv_bytes(flatten_regions(sample_regions))

        assert data.startswith(b"\xef\xbb\xbf")
        text = data.decode("utf-8-sig")
        assert text.splitlines()[0] == ",".join(EXPORT_COLUMNS)
        assert "সালমা" in text

    def test_excel_round_trip(self, sample_regions):
        data = to_excel_bytes(flatten_regions(sample_regions))

        assert data[:2] == b"PK"
        df = pd.read_excel(io.BytesIO(data), engine="openpyxl", dtype=str).fillna("")
        assert list(df.columns) == EXPORT_COLUMNS
        assert df.iloc[1]["ভূমিকা"] == ROLE_UNION_RESPONSIBLE

    def test_empty_export_still_has_header(self):
        data = to_csv_bytes([])
        assert data.decode("utf-8-sig").strip() == ",".join(EXPORT_COLUMNS)


class TestPdf:
    """PDF output"""

    def test_pdf_without_font_falls_back(self, sample_regions):
        pdf = ExportPDF()
        assert not pdf.unicode_font

        data = to_pdf_bytes(flatten_regions(sample_regions))
        assert data.startswith(b"%PDF")

    def test_missing_font_file_falls_back(self, tmp_path):
        pdf = ExportPDF(font_path=str(tmp_path / "missing.ttf"))
        assert pdf.body_font == "Helvetica"

    def test_many_rows_span_pages(self):
        rows = [ExportRow("R", "U", "W", f"Person {i}", "017", "role") for i in range(60)]
        pdf = ExportPDF()
        pdf.add_table(rows, generated_at="2024-01-01 10:00")
        assert pdf.page_no() > 1


class TestExportRegions:
    def test_formats(self, sample_regions):
        assert export_regions(sample_regions, ExportFormat.CSV).startswith(b"\xef\xbb\xbf")
        assert export_regions(sample_regions, ExportFormat.EXCEL)[:2] == b"PK"
        assert export_regions(sample_regions, ExportFormat.PDF).startswith(b"%PDF")

    def test_filenames(self):
        assert export_filename(ExportFormat.PDF) == "ডাটা_এক্সপোর্ট.pdf"
        assert export_filename(ExportFormat.EXCEL) == "ডাটা_এক্সপোর্ট.xlsx"
        assert export_filename(ExportFormat.CSV) == "ডাটা_এক্সপোর্ট.csv"
