import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

AVAILABLE_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-3-flash-preview",
    "gemini-3-pro-preview",
    "gemini-2.0-flash",
]

DEFAULT_MODEL = AVAILABLE_MODELS[0]


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    model: str = DEFAULT_MODEL
    max_tokens: int = 500
    http_timeout_ms: int = 300_000
    progress_interval: float = 0.2
    progress_step: int = 10
    progress_ceiling: int = 90
    copied_reset_seconds: float = 2.0
    workspace_ttl_seconds: float = 3600.0
    auth_email_header: str = "X-Forwarded-Email"
    dev_user_email: str = ""
    secret_key: str = ""
    port: int = 5001
    log_level: str = "INFO"


def load_settings(environ=None):
    env = os.environ if environ is None else environ

    model = env.get("COLDMAIL_MODEL", DEFAULT_MODEL).strip() or DEFAULT_MODEL
    if model not in AVAILABLE_MODELS:
        raise ValueError(f"Unknown model in COLDMAIL_MODEL: {model}")

    return Settings(
        gemini_api_key=env.get("GEMINI_API_KEY", ""),
        model=model,
        max_tokens=int(env.get("COLDMAIL_MAX_TOKENS", 500)),
        http_timeout_ms=int(env.get("COLDMAIL_HTTP_TIMEOUT_MS", 300_000)),
        progress_interval=float(env.get("PROGRESS_INTERVAL", 0.2)),
        progress_step=int(env.get("PROGRESS_STEP", 10)),
        progress_ceiling=int(env.get("PROGRESS_CEILING", 90)),
        copied_reset_seconds=float(env.get("COPIED_RESET_SECONDS", 2.0)),
        workspace_ttl_seconds=float(env.get("WORKSPACE_TTL_SECONDS", 3600)),
        auth_email_header=env.get("AUTH_EMAIL_HEADER", "X-Forwarded-Email"),
        dev_user_email=env.get("DEV_USER_EMAIL", "").strip(),
        # a random key means sessions do not survive a restart
        secret_key=env.get("FLASK_SECRET_KEY") or os.urandom(24).hex(),
        port=int(env.get("PORT", 5001)),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
