"""Tests for the email request form state."""
import pytest

from email_form import EmailRequest, FormState, apply, is_valid, missing_fields, field_name


def test_apply_replaces_one_field_and_keeps_the_rest():
    original = EmailRequest(recipient_name="John Doe", purpose="schedule a demo")
    updated = apply(original, "recipient_company", "Acme Corp")

    assert updated.recipient_company == "Acme Corp"
    assert updated.recipient_name == "John Doe"
    assert updated.purpose == "schedule a demo"
    assert original.recipient_company == ""


def test_apply_accepts_camel_case_names():
    updated = apply(EmailRequest(), "additionalInfo", "Met at SaaStr")
    assert updated.additional_info == "Met at SaaStr"


def test_apply_rejects_unknown_field():
    with pytest.raises(ValueError):
        apply(EmailRequest(), "favouriteColour", "blue")


def test_apply_rejects_unknown_tone():
    with pytest.raises(ValueError):
        apply(EmailRequest(), "tone", "sarcastic")


def test_apply_none_becomes_empty_string():
    assert apply(EmailRequest(sender_name="Jane"), "sender_name", None).sender_name == ""


@pytest.mark.parametrize("missing", ["recipient_name", "recipient_company", "purpose"])
def test_required_fields(missing, valid_request):
    request = apply(valid_request, missing, "   ")
    assert not is_valid(request)
    assert missing_fields(request) == [missing]


def test_valid_request(valid_request):
    assert is_valid(valid_request)
    assert missing_fields(valid_request) == []


def test_default_tone_is_professional():
    assert EmailRequest().tone == "professional"


def test_field_name_resolution():
    assert field_name("recipientName") == "recipient_name"
    assert field_name("recipient_name") == "recipient_name"


def test_form_state_set_and_reset():
    form = FormState()
    form.set("recipientName", "John Doe")
    form.set("recipientCompany", "Acme Corp")
    assert not form.is_valid()

    form.set("purpose", "schedule a demo")
    assert form.is_valid()

    form.reset()
    assert form.request == EmailRequest()


def test_form_state_update_is_all_or_nothing():
    form = FormState(EmailRequest(recipient_name="John Doe"))
    with pytest.raises(ValueError):
        form.update({"purpose": "demo", "tone": "grumpy"})
    assert form.request == EmailRequest(recipient_name="John Doe")


@pytest.mark.parametrize("value", [{"x": 1}, ["demo"], 42, True])
def test_apply_rejects_non_string_values(value):
    with pytest.raises(ValueError):
        apply(EmailRequest(), "purpose", value)


def test_form_state_update_rejects_non_mapping():
    form = FormState()
    with pytest.raises(ValueError):
        form.update(["purpose", "demo"])
