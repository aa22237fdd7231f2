"""Custom exceptions for the company research application.

This module defines domain-specific exceptions that provide clearer error
handling and better context than generic Python exceptions.
"""

from typing import Any, Optional


class ResearchError(Exception):
    """Base exception for all company research errors.

    All custom exceptions in this module inherit from this base class,
    making it easy to catch all research-specific errors.
    """

    pass


class ConfigurationError(ResearchError):
    """Raised when there's an error in configuration.

    Examples:
    - Settings file is not valid YAML
    - Setting has the wrong type (e.g. non-numeric temperature)
    - Concurrency limit below 1 in config or environment
    """

    pass


class ValidationError(ResearchError):
    """Raised when a research request is missing required input.

    Raised before any network call is attempted.

    Examples:
    - Empty company name
    - Empty field list
    - Missing provider credential
    - Concurrency limit below 1
    """

    pass


class ProviderError(ResearchError):
    """Raised when the AI provider returns a non-success response.

    Attributes:
        status_code: HTTP status returned by the provider, when known
        body: Error payload returned by the provider, when known
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ConnectivityError(ProviderError):
    """Raised when no response was received from the provider at all.

    Examples:
    - Request timed out
    - DNS failure or connection refused
    """

    pass


class MalformedResponseError(ProviderError):
    """Raised when the provider answered successfully but sent no content.

    An empty string is still content (it parses to an empty result); only
    a missing choice/message/content field is malformed.
    """

    def __init__(self, message: str = "malformed content", **kwargs: Any):
        super().__init__(message, **kwargs)
