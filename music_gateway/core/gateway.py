# ABOUTME: This file implements the MusicGateway that turns a prompt into Base64 audio via Vertex AI.
# ABOUTME: Provides prompt validation, the single-flight busy gate, call pacing, and retry with jittered backoff.

from __future__ import annotations
import asyncio
import random
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from music_gateway.config import DEFAULT_MODEL, Settings, get_settings
from music_gateway.core.vertex_client import MusicModelClient, VertexMusicClient
from music_gateway.logging_config import get_logger
from music_gateway.models.errors import (
    EmptyPromptError,
    GenerationFailedError,
    InvalidPromptError,
    NoAudioInResponseError,
    PromptTooLongError,
    ServerBusyError,
)
from music_gateway.models.requests import MAX_PROMPT_LENGTH
from music_gateway.monitoring.metrics import PrometheusMetrics

logger = get_logger(__name__)

DURATION_INSTRUCTION = "Please generate approximately 15 seconds of music as high-quality audio."

# Substrings of upstream error messages that indicate quota or availability trouble
RETRYABLE_MARKERS = ("429", "RESOURCE_EXHAUSTED", "rate", "Quota", "503")
RETRYABLE_CODES = (429, 503)


def now_ms() -> float:
    """Wall clock in epoch milliseconds."""
    return time.time() * 1000


@dataclass
class GatewayState:
    """Mutable gate state owned by one gateway instance.

    is_generating is advisory: the check-and-set in generate() has no await
    between the two steps, which makes it exclusive on a single event loop
    but not across threads.
    """
    last_call_at_ms: float = 0
    last_success_at_ms: float = 0
    is_generating: bool = False


def validate_prompt(prompt: Any) -> str:
    """Check prompt bounds and return it unchanged.

    Raises:
        InvalidPromptError: prompt is missing or not a string
        EmptyPromptError: prompt is blank after trimming
        PromptTooLongError: trimmed prompt is longer than MAX_PROMPT_LENGTH
    """
    if prompt is None or not isinstance(prompt, str):
        raise InvalidPromptError("Invalid prompt")
    trimmed = prompt.strip()
    if not trimmed:
        raise EmptyPromptError("Prompt must not be empty")
    if len(trimmed) > MAX_PROMPT_LENGTH:
        raise PromptTooLongError(
            f"Prompt is {len(trimmed)} characters; the limit is {MAX_PROMPT_LENGTH}"
        )
    return prompt


def resolve_model_name(model: Any, default_model: str = DEFAULT_MODEL) -> str:
    if isinstance(model, str) and model.strip():
        return model.strip()
    return default_model


def build_request_payload(prompt: str) -> Dict[str, Any]:
    return {
        "contents": [
            {
                "role": "user",
                "parts": [{"text": f"{prompt}\n\n{DURATION_INSTRUCTION}"}],
            }
        ]
    }


def _field(obj: Any, *names: str) -> Any:
    if not isinstance(obj, Mapping):
        return None
    for name in names:
        value = obj.get(name)
        if value is not None:
            return value
    return None


def extract_audio(response: Any) -> Optional[str]:
    """Return the first audio payload found in the first candidate's parts.

    Parts are scanned in order; within a part audioData is checked before
    inlineData. Both camelCase and snake_case keys are accepted.
    """
    candidates = _field(response, "candidates") or []
    if not candidates:
        return None
    content = _field(candidates[0], "content")
    parts = _field(content, "parts") or []
    for part in parts:
        for key, alias in (("audioData", "audio_data"), ("inlineData", "inline_data")):
            data = _field(_field(part, key, alias), "data")
            if data:
                return data
    return None


def is_retryable_error(err: BaseException) -> bool:
    """Whether an upstream error looks transient (quota, rate limit, unavailable)."""
    code = getattr(err, "code", None)
    if isinstance(code, int) and code in RETRYABLE_CODES:
        return True
    message = str(err)
    return any(marker in message for marker in RETRYABLE_MARKERS)


def backoff_delay_ms(
    attempt: int,
    base_delay_ms: int,
    rand: Callable[[], float] = random.random,
) -> int:
    """Exponential backoff with a jitter factor in [0.75, 1.25)."""
    return round(base_delay_ms * 2 ** (attempt - 1) * (0.75 + rand() * 0.5))


class MusicGateway:
    """Forwards prompts to a generative music model, one generation at a time.

    Clock, sleep and random sources are injectable so pacing and backoff can
    be exercised without real waiting.
    """

    _instance: Optional['MusicGateway'] = None
    _lock = threading.Lock()

    def __init__(
        self,
        client: MusicModelClient,
        default_model: str = DEFAULT_MODEL,
        max_attempts: int = 1,
        base_delay_ms: int = 1200,
        min_interval_ms: int = 2000,
        hard_cooldown_ms: int = 15000,
        state: Optional[GatewayState] = None,
        clock: Callable[[], float] = now_ms,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
        metrics: Optional[PrometheusMetrics] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._client = client
        self.default_model = default_model
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.min_interval_ms = min_interval_ms
        self.hard_cooldown_ms = hard_cooldown_ms
        self._state = state if state is not None else GatewayState()
        self._clock = clock
        self._sleep = sleep
        self._rand = rand
        self._metrics = metrics if metrics is not None else PrometheusMetrics()

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[MusicModelClient] = None) -> 'MusicGateway':
        if client is None:
            client = VertexMusicClient(project=settings.project, location=settings.location)
        return cls(
            client,
            default_model=settings.default_model,
            max_attempts=settings.max_attempts,
            base_delay_ms=settings.base_delay_ms,
            min_interval_ms=settings.min_interval_ms,
            hard_cooldown_ms=settings.hard_cooldown_ms,
        )

    @classmethod
    def instance(cls) -> 'MusicGateway':
        """Get or create the process-wide gateway."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls.from_settings(get_settings())
        return cls._instance

    @classmethod
    def _reset_instance(cls):
        """Reset singleton instance for testing purposes only."""
        cls._instance = None

    @property
    def state(self) -> GatewayState:
        return self._state

    def busy(self) -> bool:
        return self._state.is_generating

    def retry_after_ms(self) -> int:
        """Best-effort hint measured from the last success, not the in-flight call."""
        since_success = self._clock() - self._state.last_success_at_ms
        return max(0, round(self.hard_cooldown_ms - since_success))

    async def _sleep_ms(self, ms: float) -> None:
        await self._sleep(ms / 1000)

    async def generate(self, prompt: Any, model_name: Optional[str] = None) -> str:
        """Generate music for a prompt and return the Base64 audio payload.

        Raises:
            PromptValidationError: prompt is missing, empty or too long
            ServerBusyError: another generation holds the gate
            GenerationFailedError: upstream failed or returned no audio
        """
        prompt = validate_prompt(prompt)
        model_name = resolve_model_name(model_name, self.default_model)

        # No await between the check and the set
        if self._state.is_generating:
            retry_after = self.retry_after_ms()
            self._metrics.record_busy_rejection()
            logger.warning("generation_rejected_busy", retry_after_ms=retry_after)
            raise ServerBusyError(retry_after)
        self._state.is_generating = True
        self._metrics.set_generation_in_progress(True)

        started = time.monotonic()
        logger.info("generation_started", model=model_name, prompt_length=len(prompt))
        try:
            await self._pace()
            return await self._generate_with_retries(prompt, model_name)
        finally:
            self._state.is_generating = False
            self._metrics.set_generation_in_progress(False)
            self._metrics.record_generation_duration(model_name, time.monotonic() - started)

    async def _pace(self) -> None:
        elapsed = self._clock() - self._state.last_call_at_ms
        if elapsed < self.min_interval_ms:
            wait_ms = self.min_interval_ms - elapsed
            logger.info("pacing_wait", wait_ms=round(wait_ms))
            await self._sleep_ms(wait_ms)

    async def _generate_with_retries(self, prompt: str, model_name: str) -> str:
        request = build_request_payload(prompt)
        model = self._client.get_model(model_name)

        for attempt in range(1, self.max_attempts + 1):
            self._state.last_call_at_ms = self._clock()
            try:
                response = await model.generate_content(request)
                finished = self._clock()
                self._state.last_call_at_ms = finished
                self._state.last_success_at_ms = finished

                audio = extract_audio(response)
                if audio is None:
                    self._metrics.record_upstream_attempt(model_name, "no_audio")
                    logger.error("audio_missing_in_response", model=model_name, response=response)
                    raise NoAudioInResponseError(attempts=attempt)

                self._metrics.record_upstream_attempt(model_name, "success")
                logger.info("generation_succeeded", model=model_name, attempt=attempt)
                return audio
            except Exception as err:
                retryable = is_retryable_error(err)
                if not isinstance(err, NoAudioInResponseError):
                    self._metrics.record_upstream_attempt(
                        model_name, "retryable_error" if retryable else "error"
                    )

                if not retryable or attempt == self.max_attempts:
                    logger.error(
                        "generation_failed",
                        model=model_name,
                        attempt=attempt,
                        retryable=retryable,
                        error=str(err),
                    )
                    if isinstance(err, GenerationFailedError):
                        raise
                    raise GenerationFailedError(str(err) or type(err).__name__, attempts=attempt) from err

                delay = backoff_delay_ms(attempt, self.base_delay_ms, self._rand)
                logger.warning("upstream_retry", attempt=attempt, delay_ms=delay, error=str(err))
                await self._sleep_ms(delay)

        # max_attempts >= 1, so the loop always returns or raises
        raise GenerationFailedError("UNKNOWN_ERROR")
