# =============================================================================
# app.py
# Election Camp Directory
# Region / union / ward directory with real-time sync
# =============================================================================
from __future__ import annotations
import streamlit as st

from camp_core.errors import error_boundary
from camp_core.models.filters import apply_filters
from camp_core.state.session import get_runtime, get_service, init_state
from camp_core.ui.components import empty_state, filter_bar, header, render_region_card, status_badge
from camp_core.ui.theme import apply_css

st.set_page_config(
    page_title="নির্বাচনী ক্যাম্প ব্যবস্থাপনা সিস্টেম",
    page_icon="🗳️",
    layout="wide",
)

apply_css()
init_state()

runtime = get_runtime()
service = get_service()


# =============================================================================
# LIVE STATUS
# Reruns the page when another client's change reached the store
# =============================================================================
@st.fragment(run_every=runtime.config.poll_interval)
def live_status():
    status_badge(runtime.engine.status)
    version = runtime.store.version
    if version != st.session_state["_seen_version"]:
        st.session_state["_seen_version"] = version
        st.rerun()


header("নির্বাচনী ক্যাম্প ব্যবস্থাপনা সিস্টেম", "অঞ্চল, ইউনিয়ন ও ওয়ার্ড দায়িত্বশীলদের তালিকা")

top = st.columns([4, 1, 1])
with top[0]:
    live_status()
with top[1]:
    st.page_link("pages/01_Export.py", label="ডাউনলোড", icon="⬇️")
with top[2]:
    with st.popover("মূল তথ্যে ফিরে যান"):
        st.write("আপনি কি নিশ্চিত যে সব তথ্য মূল অবস্থায় ফিরিয়ে নিতে চান?")
        if st.button("হ্যাঁ, ফিরিয়ে নিন", type="primary"):
            result = service.reset_to_seed()
            if result:
                for key in ("filter_region", "filter_union", "filter_ward"):
                    st.session_state.pop(key, None)
                st.rerun()
            else:
                st.error(result.error)

filter_bar(service)
st.divider()


@error_boundary(error_message="অঞ্চল দেখানো যায়নি")
def render_regions():
    regions = service.regions
    visible = apply_filters(regions, service.filters)
    if not visible:
        empty_state()
        return
    # Palette follows the canonical position so colours stay put while filtering
    positions = {region.id: i for i, region in enumerate(regions)}
    for region in visible:
        render_region_card(service, region, positions.get(region.id, 0))


render_regions()

with st.sidebar:
    st.markdown("## 🗳️ ক্যাম্প ডিরেক্টরি")
    st.caption("(Managed by - Engr. MD. Farman Sikder)")
    st.json(runtime.engine.get_status_display(), expanded=False)
    st.session_state["debug_mode"] = st.toggle("Debug", value=st.session_state["debug_mode"])
