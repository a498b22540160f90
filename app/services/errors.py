"""
Failure taxonomy for the text-generation layer.

Recoverable failures rotate the credential and retry, then fall back.
MalformedResponse is not recoverable: it falls back for every task except
gap analysis, where it reaches the route.
"""


class GenerationError(Exception):
    """Base class for failures talking to the text-generation service."""

    recoverable = False


class NoCredentialConfigured(GenerationError):
    recoverable = True

    def __init__(self, message: str = None):
        super().__init__(
            message
            or "OpenAI API key is not configured. Set OPENAI_API_KEY, "
               "OPENAI_API_KEY_1..N or OPENAI_API_KEYS and restart the server."
        )


class ServiceUnavailable(GenerationError):
    recoverable = True


class CredentialRejected(ServiceUnavailable):
    """The service refused the current key (401/403); the next key may work."""


class RateLimited(GenerationError):
    recoverable = True


class QuotaExceeded(GenerationError):
    recoverable = True


class MalformedResponse(GenerationError):
    """No JSON object in the response, or it failed to parse/validate."""

    def __init__(self, message: str, snippet: str = ""):
        self.snippet = snippet
        super().__init__(message)


class UnsupportedFileType(ValueError):
    """Resume upload with a MIME type we cannot extract text from."""

    def __init__(self, mime_type: str):
        self.mime_type = mime_type
        super().__init__(f"Unsupported file type: {mime_type}")
