# ABOUTME: This file defines custom exception classes for the music generation gateway.
# ABOUTME: These exceptions map to specific HTTP status codes via handlers registered in main.py.

from typing import Optional


class PromptValidationError(ValueError):
    """Base class for rejected prompts.
    Maps to HTTP 400 Bad Request and is never retried.
    """
    code = "INVALID_PROMPT"


class InvalidPromptError(PromptValidationError):
    """Raised when the prompt is missing or not a string."""
    code = "INVALID_PROMPT"


class EmptyPromptError(PromptValidationError):
    """Raised when the prompt is blank after trimming."""
    code = "EMPTY_PROMPT"


class PromptTooLongError(PromptValidationError):
    """Raised when the trimmed prompt exceeds the maximum length."""
    code = "PROMPT_TOO_LONG"


class ServerBusyError(Exception):
    """Raised when a generation is already in flight.
    Maps to HTTP 429 Too Many Requests with a best-effort retry hint.
    """

    def __init__(self, retry_after_ms: int, message: str = "A generation is already in progress"):
        super().__init__(message)
        self.retry_after_ms = retry_after_ms


class GenerationFailedError(Exception):
    """Raised when the upstream model call fails or yields nothing usable.
    Maps to HTTP 500 Internal Server Error. The upstream error, if any, is chained as __cause__.
    """
    code = "GENERATION_FAILED"

    def __init__(self, message: str, attempts: Optional[int] = None):
        super().__init__(message)
        self.attempts = attempts


class NoAudioInResponseError(GenerationFailedError):
    """Raised when the upstream call succeeded but no part carried audio data."""
    code = "NO_AUDIO_IN_RESPONSE"

    def __init__(self, message: str = "NO_AUDIO_IN_RESPONSE", attempts: Optional[int] = None):
        super().__init__(message, attempts=attempts)
