# =============================================================================
# tests/unit/test_components.py
# Unit Tests for the HTML-rendering UI components
# =============================================================================

from unittest.mock import MagicMock

import pytest

from camp_core.models.entities import DirectWardRegion, Person
from camp_core.offline.sync_engine import SyncPhase, SyncStatusSnapshot
from camp_core.ui import components

MARKUP = '<img src=x onerror="alert(1)">'


@pytest.fixture
def ui_st(monkeypatch):
    mock_st = MagicMock()
    mock_st.form_submit_button.return_value = False
    monkeypatch.setattr(components, "st", mock_st)
    return mock_st


def rendered_html(mock_st) -> str:
    return "".join(
        c.args[0] for c in mock_st.markdown.call_args_list if c.kwargs.get("unsafe_allow_html")
    )


class TestNamesAreEscaped:
    """Names from the shared document never reach the page as markup"""

    def test_person_line(self, ui_st):
        components._person_line(Person("p", MARKUP, phone="<b>017</b>"))

        html = rendered_html(ui_st)
        assert "<img" not in html
        assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in html
        assert "&lt;b&gt;017&lt;/b&gt;" in html

    def test_region_card_title(self, ui_st):
        components.render_region_card(MagicMock(), DirectWardRegion("r", MARKUP))

        html = rendered_html(ui_st)
        assert "<img" not in html
        assert "<h3>&lt;img" in html

    def test_header(self, ui_st):
        components.header(MARKUP, subtitle="<script>x</script>")

        html = rendered_html(ui_st)
        assert "<img" not in html
        assert "<script>" not in html
        assert 'class="main-header"' in html

    def test_status_badge_keeps_its_own_markup(self, ui_st):
        components.status_badge(SyncStatusSnapshot(phase=SyncPhase.LIVE, is_saving=False, is_connected=True))

        html = rendered_html(ui_st)
        assert 'class="status-badge status-live"' in html
        assert "Real-time Updates" in html
