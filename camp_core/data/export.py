# =============================================================================
# camp_core/data/export.py
# Flat export of the directory (CSV, Excel, PDF)
# =============================================================================
"""
Export - one row per responsible person.

    অঞ্চল | ইউনিয়ন | ওয়ার্ড | নাম | ফোন | ভূমিকা

Union responsible persons have an empty ward; wards of pouroshova regions
have an empty union.
"""

from __future__ import annotations
import io
from dataclasses import dataclass, astuple
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional
import logging

import pandas as pd
from fpdf import FPDF

from camp_core.models.entities import RegionTree, UnionBearingRegion

logger = logging.getLogger(__name__)

ROLE_UNION_RESPONSIBLE = "ইউনিয়ন দায়িত্বশীল"
ROLE_WARD_RESPONSIBLE = "ওয়ার্ড দায়িত্বশীল"

EXPORT_COLUMNS = ["অঞ্চল", "ইউনিয়ন", "ওয়ার্ড", "নাম", "ফোন", "ভূমিকা"]
EXPORT_TITLE = "ডাটা এক্সপোর্ট"
EXPORT_BASENAME = "ডাটা_এক্সপোর্ট"

# Latin-1 stand-ins used when no Unicode font is available
FALLBACK_TITLE = "Data export"
FALLBACK_COLUMNS = ["Region", "Union", "Ward", "Name", "Phone", "Role"]

PDF_COLUMN_WIDTHS = [40, 38, 34, 60, 40, 55]    # mm, landscape A4 content width


@dataclass(frozen=True)
class ExportRow:
    region: str
    union: str
    ward: str
    person: str
    phone: str
    role: str


class ExportScope(Enum):
    ALL = "all"
    FILTERED = "filtered"


class ExportFormat(Enum):
    PDF = "pdf"
    EXCEL = "excel"
    CSV = "csv"


def select_scope(scope: ExportScope, all_regions: RegionTree, filtered_regions: RegionTree) -> RegionTree:
    return all_regions if scope == ExportScope.ALL else filtered_regions


def flatten_regions(regions: RegionTree) -> List[ExportRow]:
    rows: List[ExportRow] = []
    for region in regions:
        if isinstance(region, UnionBearingRegion):
            for union in region.unions:
                for person in union.union_responsible:
                    rows.append(ExportRow(
                        region=region.name,
                        union=union.name,
                        ward="",
                        person=person.name,
                        phone=person.phone or "",
                        role=ROLE_UNION_RESPONSIBLE,
                    ))
                for ward in union.wards:
                    for person in ward.persons:
                        rows.append(ExportRow(
                            region=region.name,
                            union=union.name,
                            ward=ward.name,
                            person=person.name,
                            phone=person.phone or "",
                            role=ROLE_WARD_RESPONSIBLE,
                        ))
        else:
            for ward in region.wards:
                for person in ward.persons:
                    rows.append(ExportRow(
                        region=region.name,
                        union="",
                        ward=ward.name,
                        person=person.name,
                        phone=person.phone or "",
                        role=ROLE_WARD_RESPONSIBLE,
                    ))
    return rows


def rows_to_dataframe(rows: List[ExportRow]) -> pd.DataFrame:
    return pd.DataFrame([astuple(row) for row in rows], columns=EXPORT_COLUMNS)


def to_csv_bytes(rows: List[ExportRow]) -> bytes:
    """CSV with a UTF-8 BOM so Excel picks the right encoding for Bangla."""
    return rows_to_dataframe(rows).to_csv(index=False).encode("utf-8-sig")


def to_excel_bytes(rows: List[ExportRow], sheet_name: str = "Sheet1") -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        rows_to_dataframe(rows).to_excel(writer, index=False, sheet_name=sheet_name)
    return buffer.getvalue()


class ExportPDF(FPDF):
    """Landscape table report with a page counter in the footer."""

    def __init__(self, title: str = EXPORT_TITLE, font_path: Optional[str] = None):
        super().__init__(orientation="L", unit="mm", format="A4")
        self.set_margins(10, 12, 10)
        self.set_auto_page_break(auto=True, margin=15)

        # Configured TTF (e.g. Noto Sans Bengali) → Helvetica
        self.unicode_font = False
        self.body_font = "Helvetica"
        if font_path and Path(font_path).exists():
            try:
                self.add_font("CampFont", "", str(font_path))
                self.body_font = "CampFont"
                self.unicode_font = True
            except Exception as e:
                logger.warning(f"Could not load PDF font {font_path}: {e}")

        self.report_title = title if self.unicode_font else FALLBACK_TITLE
        self.alias_nb_pages()

    def _text(self, value: str) -> str:
        if self.unicode_font:
            return value
        return str(value).encode("latin-1", "replace").decode("latin-1")

    def header(self):
        self.set_font(self.body_font, "", 14)
        self.cell(0, 8, self._text(self.report_title), align="C")
        self.ln(10)

    def footer(self):
        self.set_y(-12)
        self.set_font(self.body_font, "", 9)
        self.cell(0, 8, f"{self.page_no()}/{{nb}}", align="C")

    def _table_header(self, columns: List[str]):
        self.set_fill_color(243, 244, 246)
        self.set_font(self.body_font, "", 10)
        for width, column in zip(PDF_COLUMN_WIDTHS, columns):
            self.cell(width, 8, self._text(column), border=1, align="C", fill=True)
        self.ln()

    def add_table(self, rows: List[ExportRow], generated_at: str):
        self.add_page()
        self.set_font(self.body_font, "", 9)
        self.cell(0, 6, self._text(generated_at), align="R")
        self.ln(8)

        columns = EXPORT_COLUMNS if self.unicode_font else FALLBACK_COLUMNS
        self._table_header(columns)
        self.set_font(self.body_font, "", 10)
        for row in rows:
            if self.will_page_break(8):
                self.add_page()
                self._table_header(columns)
                self.set_font(self.body_font, "", 10)
            for width, value in zip(PDF_COLUMN_WIDTHS, astuple(row)):
                self.cell(width, 8, self._text(value), border=1)
            self.ln()


def to_pdf_bytes(rows: List[ExportRow], font_path: Optional[str] = None, title: str = EXPORT_TITLE) -> bytes:
    pdf = ExportPDF(title=title, font_path=font_path)
    if not pdf.unicode_font:
        logger.info("No Unicode PDF font configured; Bangla text will not render")
    pdf.add_table(rows, generated_at=datetime.now().strftime("%Y-%m-%d %H:%M"))
    return bytes(pdf.output())


def export_filename(fmt: ExportFormat) -> str:
    extension = {ExportFormat.PDF: "pdf", ExportFormat.EXCEL: "xlsx", ExportFormat.CSV: "csv"}[fmt]
    return f"{EXPORT_BASENAME}.{extension}"


def export_regions(regions: RegionTree, fmt: ExportFormat, font_path: Optional[str] = None) -> bytes:
    rows = flatten_regions(regions)
    logger.info(f"Exporting {len(rows)} rows as {fmt.value}")
    if fmt == ExportFormat.PDF:
        return to_pdf_bytes(rows, font_path=font_path)
    if fmt == ExportFormat.EXCEL:
        return to_excel_bytes(rows)
    return to_csv_bytes(rows)
