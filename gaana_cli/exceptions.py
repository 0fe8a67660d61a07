"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class GaanaCliError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(GaanaCliError):
    """Raised for issues related to configuration loading or validation."""


class InvalidQualityError(GaanaCliError):
    """Raised when an unknown quality tier is requested."""


class APIResponseError(GaanaCliError):
    """Raised when the stream API answers with a body that is not a JSON object."""


class StreamDecodeError(GaanaCliError):
    """
    Raised by the individual stream-path decoding stages and by
    ``DecodeResult.unwrap``. Carries the ``DecodeFailure`` kind.
    """

    def __init__(self, failure, detail: str = ""):
        self.failure = failure
        self.detail = detail
        message = f"{failure.value}: {detail}" if detail else failure.value
        super().__init__(message)
