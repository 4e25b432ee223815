"""Custom exceptions for Vocaboo."""

class VocabooError(Exception):
    """Base exception for Vocaboo."""
    status = 500

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

class ValidationError(VocabooError):
    """Invalid request body or parameters."""
    status = 400

class NotFoundError(VocabooError):
    """Requested record does not exist."""
    status = 404

class ConflictError(VocabooError):
    """Record clashes with an existing one."""
    status = 409

class AuthError(VocabooError):
    """Missing or unknown bearer token."""
    status = 401

class ConfigurationError(VocabooError):
    """A required API key or setting is missing."""
    status = 500

class ProviderError(VocabooError):
    """Third-party API returned an error or unusable payload."""
    status = 502

class RateLimitError(ProviderError):
    """Provider rate limit or quota exceeded."""
    status = 429

class PaymentRequiredError(ProviderError):
    """Provider refused the call for billing reasons."""
    status = 402
