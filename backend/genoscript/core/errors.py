"""
Error types raised by the GenoScript pipeline.
"""

from typing import Optional


class GenoScriptError(Exception):
    """Base class for all GenoScript errors."""


class ConfigurationError(GenoScriptError):
    """Raised at startup when required generation settings are missing."""


class GenerationError(GenoScriptError):
    """
    Raised when the text-generation backend call fails.

    The original exception is kept on ``cause`` (and chained with ``from``)
    so the transport or service message is available for diagnostics.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code


class EmptySelectionError(GenoScriptError):
    """Raised at the caller boundary when no output type is selected."""

    def __init__(self, message: str = "Select at least one output file type."):
        super().__init__(message)
