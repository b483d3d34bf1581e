import enum
import logging
import threading
from collections import deque
from dataclasses import dataclass

from config import DEFAULT_MODEL
from email_form import EmailRequest, is_valid
from system_prompt import build_prompt

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Please fill in recipient name, company, and purpose"
BUSY_MESSAGE = "An email is already being generated"
SUCCESS_MESSAGE = "Email generated!"
FAILURE_MESSAGE = "Failed to generate email. Please try again."
COPY_SUCCESS_MESSAGE = "Email copied!"
COPY_FAILURE_MESSAGE = "Failed to copy email"


class GenerationStatus(str, enum.Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Outcome(str, enum.Enum):
    """What a single generate() call did."""
    INVALID = "invalid"
    BUSY = "busy"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str

    def to_dict(self):
        return {"level": self.level, "message": self.message}


class ClipboardError(Exception):
    pass


class ProgressTicker:
    """Calls ``on_tick`` every ``interval`` seconds on a daemon thread until cancelled."""

    def __init__(self, interval, on_tick):
        self.interval = interval
        self.on_tick = on_tick
        self._stop = threading.Event()
        self._lock = threading.RLock()
        self._thread = None

    def start(self):
        self._thread = threading.Thread(target=self._run, name="progress-ticker", daemon=True)
        self._thread.start()

    def _run(self):
        while not self._stop.wait(self.interval):
            with self._lock:
                if self._stop.is_set():
                    return
                self.on_tick()

    def cancel(self):
        self._stop.set()
        # wait out a tick that is already running
        with self._lock:
            pass

    @property
    def cancelled(self):
        return self._stop.is_set()


class GenerationController:
    """Drives one cold email generation at a time.

    Owns the generated text, the decorative progress value, the transient
    "copied" flag and a queue of notices for the view. A second generate()
    while one is in flight is rejected; reset() during a flight discards
    whatever the service returns.
    """

    def __init__(self, service, clipboard=None, model=DEFAULT_MODEL, max_tokens=500,
                 search=True, progress_interval=0.2, progress_step=10, progress_ceiling=90,
                 copied_reset_seconds=2.0, ticker_factory=ProgressTicker,
                 timer_factory=threading.Timer):
        self.service = service
        self.clipboard = clipboard
        self.model = model
        self.max_tokens = max_tokens
        self.search = search
        self.progress_interval = progress_interval
        self.progress_step = progress_step
        self.progress_ceiling = progress_ceiling
        self.copied_reset_seconds = copied_reset_seconds
        self._ticker_factory = ticker_factory
        self._timer_factory = timer_factory

        self.request = EmailRequest()
        self.generated_text = ""
        self.progress = 0
        self.status = GenerationStatus.IDLE
        self.copied = False

        self._notices = deque()
        self._busy = threading.Lock()
        self._state = threading.RLock()
        self._ticker = None
        self._copied_timer = None
        self._copy_seq = 0
        self._epoch = 0

    @classmethod
    def from_settings(cls, settings, service, **kwargs):
        kwargs.setdefault("model", settings.model)
        kwargs.setdefault("max_tokens", settings.max_tokens)
        kwargs.setdefault("progress_interval", settings.progress_interval)
        kwargs.setdefault("progress_step", settings.progress_step)
        kwargs.setdefault("progress_ceiling", settings.progress_ceiling)
        kwargs.setdefault("copied_reset_seconds", settings.copied_reset_seconds)
        return cls(service, **kwargs)

    # ── notices ──

    def notify(self, level, message):
        self._notices.append(Notice(level, message))

    def drain_notices(self):
        out = []
        while self._notices:
            out.append(self._notices.popleft())
        return out

    # ── generation ──

    def generate(self, request, model=None):
        if not is_valid(request):
            self.notify("error", VALIDATION_MESSAGE)
            return Outcome.INVALID

        if not self._busy.acquire(blocking=False):
            self.notify("warning", BUSY_MESSAGE)
            return Outcome.BUSY

        ticker = None
        try:
            with self._state:
                self._epoch += 1
                epoch = self._epoch
                self.request = request
                self.generated_text = ""
                self.progress = 0
                self.status = GenerationStatus.GENERATING
                ticker = self._ticker = self._ticker_factory(self.progress_interval, self._tick)
            ticker.start()

            model = model or self.model
            logger.info("Generating email for %s at %s with %s",
                        request.recipient_name, request.recipient_company, model)
            try:
                text = self.service.generate_text(
                    build_prompt(request),
                    model=model,
                    max_tokens=self.max_tokens,
                    search=self.search,
                )
                if not isinstance(text, str) or not text:
                    raise ValueError("Generation service returned no text")
            except Exception:
                ticker.cancel()
                logger.exception("Email generation failed")
                with self._state:
                    if epoch != self._epoch:
                        return Outcome.DISCARDED
                    self.progress = 0
                    self.status = GenerationStatus.FAILED
                self.notify("error", FAILURE_MESSAGE)
                return Outcome.FAILED

            ticker.cancel()
            with self._state:
                if epoch != self._epoch:
                    logger.info("Discarding result of a generation that was reset")
                    return Outcome.DISCARDED
                self.progress = 100
                self.generated_text = text
                self.status = GenerationStatus.SUCCEEDED
            self.notify("success", SUCCESS_MESSAGE)
            return Outcome.SUCCEEDED
        finally:
            with self._state:
                if self._ticker is ticker:
                    self._ticker = None
            self._busy.release()

    def regenerate(self, model=None):
        return self.generate(self.request, model=model)

    def _tick(self):
        with self._state:
            if self.status is GenerationStatus.GENERATING:
                self.progress = min(self.progress + self.progress_step, self.progress_ceiling)

    # ── clipboard ──

    def copy(self, text=None, clipboard=None):
        sink = clipboard if clipboard is not None else self.clipboard
        if text is None:
            text = self.generated_text
        try:
            if sink is None:
                raise ClipboardError("No clipboard available")
            sink.write_text(text)
        except Exception:
            logger.warning("Clipboard write failed", exc_info=True)
            self.notify("error", COPY_FAILURE_MESSAGE)
            return False

        with self._state:
            self.copied = True
            self._copy_seq += 1
            if self._copied_timer is not None:
                self._copied_timer.cancel()
            timer = self._timer_factory(self.copied_reset_seconds, self._clear_copied,
                                        args=(self._copy_seq,))
            timer.daemon = True
            self._copied_timer = timer
        timer.start()
        self.notify("success", COPY_SUCCESS_MESSAGE)
        return True

    def _clear_copied(self, seq):
        with self._state:
            if seq == self._copy_seq:
                self.copied = False
                self._copied_timer = None

    # ── reset / view ──

    def reset(self):
        with self._state:
            self._epoch += 1
            ticker, self._ticker = self._ticker, None
            if self._copied_timer is not None:
                self._copied_timer.cancel()
                self._copied_timer = None
            self._copy_seq += 1
            self.request = EmailRequest()
            self.generated_text = ""
            self.progress = 0
            self.copied = False
            self.status = GenerationStatus.IDLE
        # the ticker thread takes the state lock on every tick
        if ticker is not None:
            ticker.cancel()

    def snapshot(self):
        with self._state:
            return {
                "status": self.status.value,
                "progress": self.progress,
                "text": self.generated_text,
                "copied": self.copied,
                "busy": self._busy.locked(),
                "request": self.request.to_dict(),
            }
