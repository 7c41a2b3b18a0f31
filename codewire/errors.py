"""
Exception types for CodeWire.
"""


class CodeWireError(Exception):
    """Base class for CodeWire errors."""


class ValidationError(CodeWireError):
    """Raised when required user input is missing or empty."""


class MissingCredentialError(CodeWireError):
    """Raised when the language-model API key is not configured."""


class UpstreamError(CodeWireError):
    """Raised when an upstream fetch or model call fails."""
