# =============================================================================
# tests/unit/test_errors.py
# Unit Tests for the exception hierarchy and error handlers
# =============================================================================

import pytest

from camp_core.errors import (
    CampError,
    DocumentNotFoundError,
    ErrorContext,
    PermissionDeniedError,
    RemoteTimeoutError,
    ValidationError,
    error_boundary,
    handle_error,
    safe_execute,
)
from camp_core.services.base_service import BaseService, ServiceResult


class TestExceptions:
    """Test codes and details of the exception hierarchy"""

    def test_codes(self):
        assert RemoteTimeoutError("slow").code == "REMOTE_001"
        assert DocumentNotFoundError("gone").code == "REMOTE_002"
        assert PermissionDeniedError("no").code == "REMOTE_003"
        assert ValidationError("bad").code == "FORM_001"

    def test_details(self):
        error = DocumentNotFoundError("gone", table="t", document_id="d")
        assert error.details == {"table": "t", "document_id": "d"}
        assert "REMOTE_002" in str(error)

    def test_to_dict(self):
        data = RemoteTimeoutError("slow", timeout=3.0).to_dict()
        assert data["error_type"] == "RemoteTimeoutError"
        assert data["details"] == {"timeout": 3.0}
        assert data["recoverable"] is True

    def test_validation_field_errors(self):
        error = ValidationError("bad", field_errors={"name": "x"})
        assert error.field_errors == {"name": "x"}
        assert error.details["fields"] == {"name": "x"}


class TestHandlers:
    """Test the Streamlit-facing handlers"""

    def test_handle_error_shows_message(self, mock_streamlit):
        handle_error(CampError("broken"))
        mock_streamlit.error.assert_called_once_with("Error: broken")

    def test_handle_error_critical(self, mock_streamlit):
        handle_error(PermissionDeniedError("denied", recoverable=False))
        assert "Critical" in mock_streamlit.error.call_args[0][0]

    def test_validation_shows_field_warnings(self, mock_streamlit):
        handle_error(ValidationError("bad", field_errors={"name": "নাম আবশ্যক"}))
        mock_streamlit.warning.assert_called_once_with("নাম আবশ্যক")

    def test_silent(self, mock_streamlit):
        handle_error(CampError("broken"), show_user_message=False)
        mock_streamlit.error.assert_not_called()

    def test_safe_execute_default(self, mock_streamlit):
        assert safe_execute(lambda: 1 / 0, default=0) == 0

    def test_safe_execute_reraise(self, mock_streamlit):
        with pytest.raises(ZeroDivisionError):
            safe_execute(lambda: 1 / 0, reraise=True)

    def test_error_context_suppresses_recoverable(self, mock_streamlit):
        with ErrorContext("Building export"):
            raise ValueError("bad data")
        assert "Building export" in mock_streamlit.error.call_args[0][0]

    def test_error_context_reraises_unrecoverable(self, mock_streamlit):
        with pytest.raises(ValueError):
            with ErrorContext("Building export", recoverable=False):
                raise ValueError("bad data")

    def test_error_boundary(self, mock_streamlit):
        @error_boundary(default_return="fallback", error_message="Could not render")
        def render():
            raise RuntimeError("boom")

        assert render() == "fallback"
        mock_streamlit.error.assert_called_once_with("Could not render")


class TestServiceResult:
    def test_from_validation_error(self):
        result = ServiceResult.from_exception(ValidationError("bad", field_errors={"phone": "x"}))
        assert not result
        assert result.error_code == "VALIDATION"
        assert result.field_errors == {"phone": "x"}

    def test_from_camp_error(self):
        result = ServiceResult.from_exception(RemoteTimeoutError("slow", timeout=1.0))
        assert result.error_code == "REMOTE_001"
        assert result.metadata == {"timeout": 1.0}

    def test_safe_execute_on_service(self, mock_streamlit):
        class Dummy(BaseService):
            pass

        def fail():
            raise CampError("x")

        service = Dummy()
        assert service.safe_execute("ok", lambda: 5).data == 5
        result = service.safe_execute("camp", fail)
        assert not result
        mock_streamlit.error.assert_not_called()
