import streamlit as st

# === COLOR PALETTE ===
PRIMARY_COLOR    = "#2563eb"
SECONDARY_COLOR  = "#1e40af"
SUCCESS_COLOR    = "#10b981"
WARNING_COLOR    = "#f59e0b"
DANGER_COLOR     = "#ef4444"
TEXT_COLOR       = "#111827"
SUBTLE_TEXT      = "#4b5563"
GRID_COLOR       = "#e5e7eb"
BACKGROUND_COLOR = "#f9fafb"
CARD_BG_LIGHT    = "#ffffff"

# Region cards cycle through these (border, tint)
REGION_PALETTE = [
    ("#3b82f6", "#eff6ff"),
    ("#10b981", "#ecfdf5"),
    ("#8b5cf6", "#f5f3ff"),
    ("#f59e0b", "#fffbeb"),
]


def region_colors(index: int):
    return REGION_PALETTE[index % len(REGION_PALETTE)]


def apply_css():
    st.markdown(f"""
        <style>
        .main {{
            background-color: {BACKGROUND_COLOR};
            color: {TEXT_COLOR};
            font-family: 'Noto Sans Bengali','SolaimanLipi','Segoe UI',sans-serif;
        }}
        .main-header {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            padding: 1.4rem 2rem; border-radius: 16px; margin-bottom: 1.5rem;
            box-shadow: 0 8px 24px rgba(37,99,235,.25);
        }}
        .status-badge {{
            display: inline-flex; align-items: center; gap: .4rem;
            padding: .2rem .7rem; border-radius: 999px; font-size: .8rem; font-weight: 500;
        }}
        .status-badge .dot {{ width: 8px; height: 8px; border-radius: 50%; }}
        .status-saving {{ background: #dbeafe; color: #1e40af; }}
        .status-saving .dot {{ background: #3b82f6; }}
        .status-live {{ background: #d1fae5; color: #065f46; }}
        .status-live .dot {{ background: {SUCCESS_COLOR}; }}
        .status-local {{ background: #fef3c7; color: #92400e; }}
        .status-local .dot {{ background: {WARNING_COLOR}; }}
        .region-card {{
            padding: .9rem 1.1rem; border-radius: 12px; margin: .4rem 0 .6rem 0;
            border-left: 6px solid var(--region-border); background: var(--region-tint);
        }}
        .region-card h3 {{ margin: 0; color: {TEXT_COLOR}; font-size: 1.2rem; }}
        .person-line {{ font-size: .92rem; color: {SUBTLE_TEXT}; }}
        .stButton button {{ border-radius: 8px; font-weight: 500; }}
        h1,h2,h3,h4 {{ color: {TEXT_COLOR}; font-weight: 600; }}
        [data-testid="stSidebar"] {{ background-color: {CARD_BG_LIGHT}; border-right: 1px solid {GRID_COLOR}; }}
        </style>
    """, unsafe_allow_html=True)
