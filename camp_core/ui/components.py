import html

import streamlit as st
from typing import Callable, Optional

from camp_core.models.entities import (
    DirectWardRegion,
    Person,
    Region,
    UnionCouncil,
    Ward,
)
from camp_core.models.filters import RegionFilter, available_unions, available_wards, filter_stats
from camp_core.offline.sync_engine import SyncStatusSnapshot
from camp_core.services.base_service import ServiceResult
from camp_core.services.camp_service import CampService
from camp_core.services.validation import FormKind
from .theme import region_colors

CASCADE_KEYS = {
    "region": ("filter_union", "filter_ward"),
    "union": ("filter_ward",),
    "ward": (),
}


def header(title: str, subtitle: str = "", icon: str = "🗳️"):
    st.markdown(f"""
        <div class="main-header">
            <div style="display:flex;gap:1.2rem;align-items:center;">
                <div style="font-size:2.6rem;">{html.escape(icon)}</div>
                <div>
                    <h1 style="margin:0; font-size:1.9rem; color:white;">{html.escape(title)}</h1>
                    <p style="margin:.35rem 0 0 0;color:rgba(255,255,255,.85);font-size:1rem">{html.escape(subtitle)}</p>
                </div>
            </div>
        </div>
    """, unsafe_allow_html=True)


def status_badge(status: SyncStatusSnapshot):
    """Saving / Real-time / Local indicator."""
    if status.is_saving:
        css = "status-saving"
    elif status.is_connected:
        css = "status-live"
    else:
        css = "status-local"
    st.markdown(
        f'<span class="status-badge {css}"><span class="dot"></span>{html.escape(status.label)}</span>',
        unsafe_allow_html=True,
    )


def _show_result(result: ServiceResult) -> bool:
    if result:
        return True
    if result.field_errors:
        for message in result.field_errors.values():
            st.warning(message)
    else:
        st.error(result.error)
    return False


# =============================================================================
# FILTER BAR
# =============================================================================

def filter_bar(service: CampService):
    """Cascading region → union → ward selectors with stats for the region."""
    regions = service.regions
    filters = service.filters

    def on_change(kind: str, key: str):
        service.set_filters(**{kind: st.session_state[key] or ""})
        # Cascaded selectors start over
        for dependent in CASCADE_KEYS[kind]:
            st.session_state.pop(dependent, None)

    region_ids = [""] + [region.id for region in regions]
    region_names = {region.id: region.name for region in regions}
    cols = st.columns([3, 3, 3, 2])

    with cols[0]:
        st.selectbox(
            "অঞ্চল নির্বাচন করুন",
            region_ids,
            index=region_ids.index(filters.region) if filters.region in region_ids else 0,
            format_func=lambda rid: region_names.get(rid, "সব অঞ্চল"),
            key="filter_region",
            on_change=on_change,
            args=("region", "filter_region"),
        )

    unions = available_unions(regions, filters.region)
    union_ids = [""] + [union.id for union in unions]
    union_names = {union.id: union.name for union in unions}
    with cols[1]:
        st.selectbox(
            "ইউনিয়ন নির্বাচন করুন",
            union_ids,
            index=union_ids.index(filters.union) if filters.union in union_ids else 0,
            format_func=lambda uid: union_names.get(uid, "সব ইউনিয়ন"),
            key="filter_union",
            on_change=on_change,
            args=("union", "filter_union"),
            disabled=not unions,
        )

    wards = available_wards(regions, filters.region, filters.union)
    ward_ids = [""] + [ward.id for ward in wards]
    ward_labels = {ward.id: ward.label for ward in wards}
    with cols[2]:
        st.selectbox(
            "ওয়ার্ড নির্বাচন করুন",
            ward_ids,
            index=ward_ids.index(filters.ward) if filters.ward in ward_ids else 0,
            format_func=lambda wid: ward_labels.get(wid, "সব ওয়ার্ড"),
            key="filter_ward",
            on_change=on_change,
            args=("ward", "filter_ward"),
            disabled=not filters.region,
        )

    with cols[3]:
        st.write("")
        if st.button("সব ফিল্টার সাফ করুন", disabled=filters.is_empty, use_container_width=True):
            service.set_filters(RegionFilter())
            for key in ("filter_region", "filter_union", "filter_ward"):
                st.session_state.pop(key, None)
            st.rerun()

    stats = filter_stats(regions, filters)
    if stats is not None:
        st.caption(
            f"ইউনিয়ন: **{stats.total_unions}** · ওয়ার্ড: **{stats.total_wards}** · "
            f"মোট দায়িত্বশীল: **{stats.total_persons}**"
        )


# =============================================================================
# FORMS
# =============================================================================

def entity_form(
    key: str,
    kind: FormKind,
    submit: Callable[[str, str], ServiceResult],
    initial_name: str = "",
    initial_phone: str = "",
):
    """Name (and phone for person kinds) form; submit returns the service result."""
    editing = bool(initial_name)
    with st.form(key, clear_on_submit=not editing):
        name = st.text_input(kind.name_label, value=initial_name, placeholder=f"{kind.name_label} লিখুন")
        phone = ""
        if kind.requires_phone:
            phone = st.text_input("ফোন নম্বর", value=initial_phone, placeholder="ফোন নম্বর লিখুন")
        submitted = st.form_submit_button("সংরক্ষণ করুন" if editing else "যোগ করুন")

    if submitted and _show_result(submit(name, phone)):
        st.rerun()


def confirm_delete(key: str, prompt: str, on_confirm: Callable[[], ServiceResult]):
    with st.popover("🗑️", help="মুছে দিন"):
        st.write(prompt)
        if st.button("মুছে দিন", key=key, type="primary") and _show_result(on_confirm()):
            st.rerun()


# =============================================================================
# TREE
# =============================================================================

def _person_line(person: Person, role_icon: str = "👤"):
    phone = f" · 📞 {html.escape(person.phone)}" if person.phone else ""
    st.markdown(
        f'<div class="person-line">{role_icon} {html.escape(person.name)}{phone}</div>',
        unsafe_allow_html=True,
    )


def render_ward(service: CampService, parent_id: str, ward: Ward):
    with st.container(border=True):
        cols = st.columns([6, 1, 1])
        cols[0].markdown(f"**{ward.name}**")
        with cols[1]:
            with st.popover("✏️", help="ওয়ার্ড সম্পাদনা করুন"):
                entity_form(
                    f"edit-ward-{ward.id}",
                    FormKind.WARD,
                    lambda name, _phone: service.edit_ward(ward.id, name, parent_id=parent_id),
                    initial_name=ward.name,
                )
        with cols[2]:
            confirm_delete(
                f"delete-ward-{ward.id}",
                f'আপনি কি নিশ্চিত যে "{ward.name}" ওয়ার্ড মুছে দিতে চান?',
                lambda: service.delete_ward(parent_id, ward.id),
            )

        for person in ward.persons:
            pcols = st.columns([6, 1, 1])
            with pcols[0]:
                _person_line(person)
            with pcols[1]:
                with st.popover("✏️", help="ওয়ার্ড দায়িত্বশীল সম্পাদনা করুন"):
                    entity_form(
                        f"edit-person-{person.id}",
                        FormKind.PERSON,
                        lambda name, phone, pid=person.id: service.edit_ward_person(
                            parent_id, ward.id, pid, name, phone
                        ),
                        initial_name=person.name,
                        initial_phone=person.phone or "",
                    )
            with pcols[2]:
                confirm_delete(
                    f"delete-person-{person.id}",
                    f'আপনি কি নিশ্চিত যে "{person.name}" কে মুছে দিতে চান?',
                    lambda pid=person.id: service.delete_ward_person(parent_id, ward.id, pid),
                )

        with st.popover("+ ওয়ার্ড দায়িত্বশীল যোগ করুন"):
            entity_form(
                f"add-person-{ward.id}",
                FormKind.PERSON,
                lambda name, phone: service.add_ward_person(parent_id, ward.id, name, phone),
            )


def render_union(service: CampService, union: UnionCouncil):
    with st.expander(f"🏛️ {union.name}", expanded=True):
        with st.popover("✏️ ইউনিয়ন নাম সম্পাদনা করুন"):
            entity_form(
                f"edit-union-{union.id}",
                FormKind.UNION,
                lambda name, _phone: service.submit_union_edit(union.id, name),
                initial_name=union.name,
            )

        if union.union_responsible:
            st.markdown("**ইউনিয়ন দায়িত্বশীল:**")
        for person in union.union_responsible:
            pcols = st.columns([6, 1, 1])
            with pcols[0]:
                _person_line(person, "⭐")
            with pcols[1]:
                with st.popover("✏️", help="ইউনিয়ন দায়িত্বশীল সম্পাদনা করুন"):
                    entity_form(
                        f"edit-union-person-{person.id}",
                        FormKind.UNION_PERSON,
                        lambda name, phone, pid=person.id: service.edit_union_person(
                            union.id, pid, name, phone
                        ),
                        initial_name=person.name,
                        initial_phone=person.phone or "",
                    )
            with pcols[2]:
                confirm_delete(
                    f"delete-union-person-{person.id}",
                    f'আপনি কি নিশ্চিত যে "{person.name}" কে ইউনিয়ন দায়িত্বশীল থেকে মুছে দিতে চান?',
                    lambda pid=person.id: service.delete_union_person(union.id, pid),
                )

        acols = st.columns(2)
        with acols[0]:
            with st.popover("+ ওয়ার্ড যোগ করুন", use_container_width=True):
                entity_form(
                    f"add-ward-{union.id}",
                    FormKind.WARD,
                    lambda name, _phone: service.add_ward(union.id, name),
                )
        if service.can_add_union_person(union.id):
            with acols[1]:
                with st.popover("+ ইউনিয়ন দায়িত্বশীল", use_container_width=True):
                    entity_form(
                        f"add-union-person-{union.id}",
                        FormKind.UNION_PERSON,
                        lambda name, phone: service.add_union_person(union.id, name, phone),
                    )

        if union.wards:
            st.markdown("**ওয়ার্ডসমূহ:**")
        for ward in union.wards:
            render_ward(service, union.id, ward)


def render_region_card(service: CampService, region: Region, index: int = 0):
    border, tint = region_colors(index)
    st.markdown(
        f'<div class="region-card" style="--region-border:{border};--region-tint:{tint}">'
        f"<h3>{html.escape(region.name)}</h3></div>",
        unsafe_allow_html=True,
    )

    if isinstance(region, DirectWardRegion):
        with st.popover("+ নতুন ওয়ার্ড যোগ করুন"):
            entity_form(
                f"add-ward-{region.id}",
                FormKind.WARD,
                lambda name, _phone: service.add_ward(region.id, name),
            )
        if not region.wards:
            st.caption("কোন ওয়ার্ড নেই")
        for ward in region.wards:
            render_ward(service, region.id, ward)
    else:
        if not region.unions:
            st.caption("কোন ইউনিয়ন নেই")
        for union in region.unions:
            render_union(service, union)


def empty_state(message: Optional[str] = None):
    st.info(message or "কোন তথ্য পাওয়া যায়নি")
