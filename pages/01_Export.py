# =============================================================================
# pages/01_Export.py
# Download the directory
# Scope: current filters or everything | Format: PDF, Excel, CSV
# =============================================================================
from __future__ import annotations
import streamlit as st

from camp_core.data.export import (
    ExportFormat,
    ExportScope,
    export_filename,
    export_regions,
    flatten_regions,
    rows_to_dataframe,
    select_scope,
)
from camp_core.errors import ErrorContext, safe_execute
from camp_core.state.session import get_runtime, get_service, init_state
from camp_core.ui.components import header
from camp_core.ui.theme import apply_css

st.set_page_config(
    page_title="ডাটা এক্সপোর্ট",
    page_icon="⬇️",
    layout="wide",
)

apply_css()
init_state()

runtime = get_runtime()
service = get_service()

FORMAT_LABELS = {
    ExportFormat.PDF: "PDF",
    ExportFormat.EXCEL: "Excel (.xlsx)",
    ExportFormat.CSV: "CSV",
}
SCOPE_LABELS = {
    ExportScope.FILTERED: "বর্তমান ফিল্টার অনুযায়ী",
    ExportScope.ALL: "সব তথ্য",
}
MIME_TYPES = {
    ExportFormat.PDF: "application/pdf",
    ExportFormat.EXCEL: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.CSV: "text/csv",
}

header("ডাটা এক্সপোর্ট", "দায়িত্বশীলদের তালিকা ডাউনলোড করুন", icon="⬇️")

cols = st.columns(2)
with cols[0]:
    fmt = st.radio(
        "ফরম্যাট",
        list(ExportFormat),
        format_func=FORMAT_LABELS.get,
        key="export_format_choice",
        horizontal=True,
    )
with cols[1]:
    scope = st.radio(
        "ডাউনলোড স্কোপ",
        list(ExportScope),
        format_func=SCOPE_LABELS.get,
        key="export_scope_choice",
        horizontal=True,
    )

if scope == ExportScope.FILTERED and service.filters.is_empty:
    st.caption("কোন ফিল্টার নির্বাচন করা হয়নি, সব তথ্য ডাউনলোড হবে")

regions = select_scope(scope, service.regions, service.filtered_regions())
rows = safe_execute(flatten_regions, regions, default=[], error_message="তালিকা তৈরি করা যায়নি")

st.markdown(f"**{len(rows)}** জন দায়িত্বশীল")
st.dataframe(rows_to_dataframe(rows), use_container_width=True, hide_index=True)

with ErrorContext("Building export"):
    data = export_regions(regions, fmt, font_path=runtime.config.pdf_font_path)
    st.download_button(
        "ডাউনলোড করুন",
        data=data,
        file_name=export_filename(fmt),
        mime=MIME_TYPES[fmt],
        type="primary",
        disabled=not rows,
    )

st.page_link("app.py", label="ফিরে যান", icon="↩️")
