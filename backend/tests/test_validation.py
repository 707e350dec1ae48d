import pytest

from boiler_leads.domain.errors import SubmissionValidationError
from boiler_leads.domain.inquiries.schemas import validate_inquiry, validate_visit


def _fields(exc_info) -> set[str]:
    return {error["field"] for error in exc_info.value.errors}


def test_valid_inquiry_keeps_values_as_sent():
    inquiry = validate_inquiry({"name": "  Jane Doe ", "phone": " 07700900000", "postcode": "SW1A 1AA "})

    assert inquiry.name == "  Jane Doe "
    assert inquiry.phone == " 07700900000"
    assert inquiry.postcode == "SW1A 1AA "
    assert inquiry.email is None
    assert inquiry.notes is None


@pytest.mark.parametrize("missing", ["name", "phone", "postcode"])
def test_missing_required_field_is_reported(missing):
    payload = {"name": "Jane Doe", "phone": "07700900000", "postcode": "SW1A 1AA"}
    payload.pop(missing)

    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_inquiry(payload)

    assert _fields(exc_info) == {missing}
    assert exc_info.value.detail == "Invalid data"


def test_whitespace_only_name_is_rejected():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_inquiry({"name": "   ", "phone": "07700900000", "postcode": "SW1A 1AA"})

    assert _fields(exc_info) == {"name"}


def test_all_errors_are_reported_together():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_inquiry({"email": "not-an-email"})

    assert _fields(exc_info) == {"name", "phone", "postcode", "email"}
    for error in exc_info.value.errors:
        assert error["message"]


def test_phone_longer_than_column_is_rejected():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_inquiry({"name": "Jane", "phone": "0" * 21, "postcode": "SW1A 1AA"})

    assert _fields(exc_info) == {"phone"}


def test_message_is_accepted_as_notes():
    inquiry = validate_inquiry(
        {"name": "Jane", "phone": "07700900000", "postcode": "SW1A 1AA", "message": "Combi swap please"}
    )

    assert inquiry.notes == "Combi swap please"


def test_notes_are_bounded():
    with pytest.raises(SubmissionValidationError):
        validate_inquiry({"name": "Jane", "phone": "07700900000", "postcode": "SW1A 1AA", "notes": "x" * 2001})


def test_camel_and_snake_case_inputs_are_equivalent():
    base = {"name": "Jane", "phone": "07700900000", "postcode": "SW1A 1AA"}

    camel = validate_inquiry({**base, "selectedModel": "4000"})
    snake = validate_inquiry({**base, "selected_model": "4000"})

    assert camel == snake
    assert camel.selected_model == "4000"


def test_unknown_selected_model_is_rejected():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_inquiry({"name": "Jane", "phone": "07700900000", "postcode": "SW1A 1AA", "selectedModel": "9000"})

    assert _fields(exc_info) == {"selectedModel"}


def test_client_supplied_id_and_created_at_are_ignored():
    inquiry = validate_inquiry(
        {
            "id": 99,
            "createdAt": "2020-01-01T00:00:00Z",
            "name": "Jane",
            "phone": "07700900000",
            "postcode": "SW1A 1AA",
        }
    )

    dumped = inquiry.model_dump()
    assert "id" not in dumped
    assert "created_at" not in dumped


def test_blank_optional_strings_become_none():
    inquiry = validate_inquiry(
        {"name": "Jane", "phone": "07700900000", "postcode": "SW1A 1AA", "email": "", "ref": "  ", "epc": ""}
    )

    assert inquiry.email is None
    assert inquiry.ref is None
    assert inquiry.epc is None


@pytest.mark.parametrize("raw", [None, [], "name=Jane", 42])
def test_non_object_body_is_rejected(raw):
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_inquiry(raw)

    assert _fields(exc_info) == {"body"}


def test_visit_requires_page():
    with pytest.raises(SubmissionValidationError) as exc_info:
        validate_visit({"ref": "abc"})

    assert _fields(exc_info) == {"page"}


def test_visit_page_is_bounded():
    with pytest.raises(SubmissionValidationError):
        validate_visit({"page": "p" * 51})


def test_visit_optional_fields():
    visit = validate_visit({"page": "v11", "ref": "", "epc": "C"})

    assert visit.page == "v11"
    assert visit.ref is None
    assert visit.epc == "C"
