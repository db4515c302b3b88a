"""Custom exceptions for notification providers.

These are raised inside a provider's delivery step and never escape
BaseProvider.send, which folds them into a failed SendResult.
"""


class ProviderError(Exception):
    """Base exception for all vendor-side failures."""

    pass


class ProviderConfigurationError(ProviderError):
    """Provider credentials or settings are unusable (e.g. a malformed key)."""

    pass


class ProviderDeliveryError(ProviderError):
    """The vendor refused or failed to accept the message."""

    pass


class ProviderHTTPError(ProviderDeliveryError):
    """Vendor HTTP API answered with a 4xx or 5xx status."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ProviderTimeoutError(ProviderDeliveryError):
    """Vendor call did not complete within the transport timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url
