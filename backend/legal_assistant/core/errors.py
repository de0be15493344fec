"""Error taxonomy shared by the stores, the session controller and the ingestion workflow."""


class LegalAssistantError(Exception):
    pass


class CredentialMissingError(LegalAssistantError):
    """The acting user has no API key for the provider a completion call needs."""

    def __init__(self, provider: str, message: str | None = None):
        self.provider = provider
        super().__init__(message or f"No API key configured for provider '{provider}'")


class CompletionServiceError(LegalAssistantError):
    """The completion service failed, timed out, or returned unusable output."""


class PersistenceError(LegalAssistantError):
    """A key-value read or write against the backing store failed."""


class ValidationError(LegalAssistantError):
    """Input rejected at the boundary before any state transition."""
