"""Error taxonomy shared by the client, the interview controller and the CLI.

Every error carries a human-readable ``message`` that is safe to print:
none of them ever embeds the API key.
"""

from __future__ import annotations


class SpecGenError(Exception):
    """Base class for every failure that ends a run."""

    label = "Error"

    def __init__(self, message: str = ""):
        self.message = message or self.label
        super().__init__(self.message)

    def user_message(self) -> str:
        return f"{self.label}: {self.message}"


class ConfigError(SpecGenError):
    label = "Configuration error"


class InvalidInput(SpecGenError):
    label = "Invalid input"


class ArtifactWriteFailure(SpecGenError):
    label = "Could not write specification"


# ─── Completion failures ──────────────────────────────────────────────────────

class CompletionError(SpecGenError):
    """Raised by a completion client; the controller never retries on its own."""

    label = "Completion failed"


class TransportFailure(CompletionError):
    label = "Network error"


class AuthFailure(CompletionError):
    label = "Authentication failed"


class ProviderError(CompletionError):
    label = "API error"


class MalformedResponse(CompletionError):
    label = "Failed to decode response"


class NoCompletion(CompletionError):
    label = "No completion"

    def __init__(self, message: str = "No choices returned from the API"):
        super().__init__(message)
