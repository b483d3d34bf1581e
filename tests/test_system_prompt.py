"""Tests for the copywriter prompt."""
from email_form import EmailRequest
from system_prompt import build_prompt, build_signature


def test_prompt_embeds_every_field():
    request = EmailRequest(
        recipient_name="John Doe",
        recipient_company="Acme Corp",
        recipient_role="CTO",
        recipient_industry="Logistics",
        sender_name="Jane Smith",
        sender_company="Routewise",
        sender_role="Sales Director",
        purpose="schedule a demo",
        tone="friendly",
        additional_info="Acme just opened a Berlin hub",
    )
    prompt = build_prompt(request)

    for value in request.to_dict().values():
        assert value in prompt
    assert "Subject: [Compelling subject line]" in prompt
    assert "max 200 words" in prompt
    assert "call-to-action" in prompt
    assert "web search" in prompt


def test_signature_skips_empty_sender_details():
    assert build_signature(EmailRequest(sender_name="Jane")) == "Best regards,\nJane"
    assert build_signature(
        EmailRequest(sender_name="Jane", sender_company="Routewise", sender_role="CEO")
    ) == "Best regards,\nJane\nRoutewise\nCEO"


def test_braces_in_user_input_are_kept_verbatim():
    prompt = build_prompt(EmailRequest(purpose="pitch our {beta} plan"))
    assert "Purpose: pitch our {beta} plan" in prompt
