COLD_EMAIL_PROMPT = """\
You are an expert cold email copywriter. Research the recipient's company and industry using web search. Write a highly personalized cold email for the following scenario:

Recipient:
- Name: {recipient_name}
- Company: {recipient_company}
- Role: {recipient_role}
- Industry: {recipient_industry}

Sender:
- Name: {sender_name}
- Company: {sender_company}
- Role: {sender_role}

Purpose: {purpose}
Tone: {tone}
Additional Info: {additional_info}

Guidelines:
- Use web search to find recent news, achievements, or pain points about the recipient's company/industry.
- Start with a personalized hook referencing your research.
- Clearly state the value proposition and why it's relevant now.
- Include a specific, low-friction call-to-action.
- Keep it concise (max {max_words} words), human, and non-generic.
- Format as:
Subject: [Compelling subject line]

[Email body]

{signature}"""

MAX_WORDS = 200

TIPS = [
    "Reference recent news or achievements about the recipient's company.",
    "Keep your message concise and focused on value.",
    "Personalize your opening line, avoid generic intros.",
    "End with a clear, low-friction call-to-action.",
]


def build_signature(request):
    lines = ["Best regards,", request.sender_name]
    if request.sender_company:
        lines.append(request.sender_company)
    if request.sender_role:
        lines.append(request.sender_role)
    return "\n".join(lines)


def build_prompt(request, max_words=MAX_WORDS):
    """Fill the copywriter prompt with every field of an EmailRequest."""
    return COLD_EMAIL_PROMPT.format(
        max_words=max_words,
        signature=build_signature(request),
        **request.to_dict(),
    )
