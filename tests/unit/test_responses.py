import pytest

from src.bookme_engine.booking.types import BookingRecord
from src.bookme_engine.exceptions import (
    CalendarApiError, DecryptionError, PastDateError, PersistenceError, SlotConflictError,
    TenantNotFoundError, TokenRefreshError, ValidationError
)
from src.bookme_engine.responses import BOOKING_SUCCESS_MESSAGE, booking_success, error_response


@pytest.mark.unit
class TestErrorResponse:
    """Test cases for mapping failures to client responses."""

    @pytest.mark.parametrize("error, status, code", [
        (ValidationError("Invalid email address"), 400, "validation_error"),
        (PastDateError(), 400, "past_date"),
        (TenantNotFoundError(), 404, "tenant_not_found"),
        (SlotConflictError(), 409, "slot_conflict"),
        (TokenRefreshError("invalid_grant", status="invalid_grant"), 401, "calendar_reconnect_required"),
        (DecryptionError("failed authentication"), 500, "credential_integrity"),
        (CalendarApiError("Forbidden", status=403), 502, "calendar_unavailable"),
        (PersistenceError("store down", event_id="evt_1"), 500, "persistence_failure"),
    ])
    def test_status_and_code(self, error, status, code):
        response_status, body = error_response(error)
        assert response_status == status
        assert body["success"] is False
        assert body["code"] == code

    def test_client_errors_keep_their_message(self):
        _, body = error_response(ValidationError("Invalid email address"))
        assert body["message"] == "Invalid email address"

    def test_conflict_message(self):
        _, body = error_response(SlotConflictError())
        assert body["message"] == SlotConflictError.client_message

    def test_upstream_details_are_not_leaked(self):
        _, body = error_response(CalendarApiError('{"error": "quota for project 1234"}', status=403))
        assert "1234" not in body["message"]
        assert body["message"] == CalendarApiError.client_message

    def test_persistence_failure_hides_event_id(self, caplog):
        _, body = error_response(PersistenceError("store down", event_id="evt_orphan"))
        assert "evt_orphan" not in body["message"]
        assert "evt_orphan" in caplog.text

    def test_unexpected_exception(self):
        status, body = error_response(KeyError("boom"))
        assert status == 500
        assert body["code"] == "internal_error"
        assert "boom" not in body["message"]


@pytest.mark.unit
def test_booking_success():
    record = BookingRecord(
        tenant_id="alice", date="2026-11-04", start_time="10:00", end_time="11:00",
        start_iso="2026-11-04T01:00:00.000Z", end_iso="2026-11-04T02:00:00.000Z",
        name="Ken Ito", email="ken@example.com", event_id="evt_123",
    )
    status, body = booking_success(record)
    assert status == 200
    assert body == {
        "success": True,
        "message": BOOKING_SUCCESS_MESSAGE,
        "booking": {
            "date": "2026-11-04",
            "startTime": "10:00",
            "endTime": "11:00",
            "start": "2026-11-04T01:00:00.000Z",
            "end": "2026-11-04T02:00:00.000Z",
        },
    }
