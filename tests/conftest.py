"""Shared fakes for the generation service, clipboard and timers."""
import pytest

from config import Settings
from controller import GenerationController
from email_form import EmailRequest


class FakeService:
    def __init__(self, text="Subject: Hi\n\nBody", error=None):
        self.text = text
        self.error = error
        self.calls = []
        self.during_call = None

    def generate_text(self, prompt, model, max_tokens, search=True):
        self.calls.append({"prompt": prompt, "model": model, "max_tokens": max_tokens, "search": search})
        if self.during_call is not None:
            self.during_call()
        if self.error is not None:
            raise self.error
        return self.text


class ManualTicker:
    instances = []

    def __init__(self, interval, on_tick):
        self.interval = interval
        self.on_tick = on_tick
        self.started = False
        self.cancelled = False
        ManualTicker.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def tick(self, times=1):
        for _ in range(times):
            if not self.cancelled:
                self.on_tick()


class ManualTimer:
    instances = []

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False
        ManualTimer.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


@pytest.fixture
def service():
    return FakeService()


@pytest.fixture
def tickers():
    ManualTicker.instances = []
    return ManualTicker.instances


@pytest.fixture
def timers():
    ManualTimer.instances = []
    return ManualTimer.instances


@pytest.fixture
def controller(service, tickers, timers):
    return GenerationController(
        service,
        ticker_factory=ManualTicker,
        timer_factory=ManualTimer,
    )


@pytest.fixture
def valid_request():
    return EmailRequest(
        recipient_name="John Doe",
        recipient_company="Acme Corp",
        purpose="schedule a demo",
    )


@pytest.fixture
def settings():
    return Settings(secret_key="test-secret")
