"""Custom exceptions for Twitter Ads MCP Server."""


class TwitterAdsError(Exception):
    """Base exception for Twitter Ads client errors."""

    pass


class ConfigurationError(TwitterAdsError):
    """Raised when credentials or settings are invalid or missing."""

    pass


class InvalidRequestError(TwitterAdsError):
    """Raised when a request cannot be assembled.

    Covers unsupported HTTP methods, unparseable URLs and an API version
    constant without a leading number.
    """

    pass


class SigningError(TwitterAdsError):
    """Raised when the OAuth signature cannot be computed."""

    pass


class TransportError(TwitterAdsError):
    """Raised when the HTTP transport fails to deliver a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

