from dataclasses import dataclass, fields, replace, asdict

TONES = ("professional", "friendly", "casual", "formal", "enthusiastic")

REQUIRED_FIELDS = ("recipient_name", "recipient_company", "purpose")

# camelCase names used by the page
FIELD_ALIASES = {
    "recipientName": "recipient_name",
    "recipientCompany": "recipient_company",
    "recipientRole": "recipient_role",
    "recipientIndustry": "recipient_industry",
    "senderName": "sender_name",
    "senderCompany": "sender_company",
    "senderRole": "sender_role",
    "purpose": "purpose",
    "tone": "tone",
    "additionalInfo": "additional_info",
}


@dataclass(frozen=True)
class EmailRequest:
    recipient_name: str = ""
    recipient_company: str = ""
    recipient_role: str = ""
    recipient_industry: str = ""
    sender_name: str = ""
    sender_company: str = ""
    sender_role: str = ""
    purpose: str = ""
    tone: str = "professional"
    additional_info: str = ""

    def to_dict(self):
        return asdict(self)


FIELD_NAMES = tuple(f.name for f in fields(EmailRequest))


def field_name(name):
    """Resolve a snake_case or camelCase field name, or raise ValueError."""
    if name in FIELD_NAMES:
        return name
    if name in FIELD_ALIASES:
        return FIELD_ALIASES[name]
    raise ValueError(f"Unknown field: {name}")


def apply(request, field, value):
    """Return a copy of ``request`` with one field replaced."""
    name = field_name(field)
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise ValueError(f"Field {name} must be a string")
    if name == "tone" and value not in TONES:
        raise ValueError(f"Unknown tone: {value}")
    return replace(request, **{name: value})


def missing_fields(request):
    return [name for name in REQUIRED_FIELDS if not getattr(request, name).strip()]


def is_valid(request):
    return not missing_fields(request)


class FormState:
    """Holds the current request; every change swaps in a new EmailRequest."""

    def __init__(self, request=None):
        self.request = request or EmailRequest()

    def set(self, field, value):
        self.request = apply(self.request, field, value)
        return self.request

    def update(self, values):
        # validate the whole batch before touching state
        if values is not None and not isinstance(values, dict):
            raise ValueError("Fields must be an object")
        request = self.request
        for field, value in (values or {}).items():
            request = apply(request, field, value)
        self.request = request
        return self.request

    def is_valid(self):
        return is_valid(self.request)

    def reset(self):
        self.request = EmailRequest()
        return self.request
