from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class ValidationError(DomainError):
    """Malformed or missing input."""


class InvalidCheckoutRequestError(ValidationError):
    """Checkout request cannot be turned into a session."""


class ContactValidationError(ValidationError):
    """Contact form payload is incomplete or malformed."""


class ProviderError(DomainError):
    """A third-party API call failed."""


class RateUnavailableError(ProviderError):
    """Exchange rates could not be fetched."""


class EmailDeliveryError(ProviderError):
    """The email relay rejected or could not send a message."""


class SignatureError(DomainError):
    """Webhook payload failed authenticity checks."""
