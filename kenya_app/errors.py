"""
Error taxonomy.

Only ConfigurationBlockedError is systemic: it means the assistant as a whole
is unsafe to use. Every other error is scoped to the request that raised it.
"""

from typing import Optional

SECURITY_BLOCK_MARKER = "SECURITY BLOCK"


class KenyaAIError(Exception):
    """Base class for all errors raised by kenya_app."""


class ConfigurationError(KenyaAIError):
    """Static configuration is incomplete (e.g. a module has no prompt)."""


class ConfigurationBlockedError(KenyaAIError):
    """The compliance gate reported ``blocked``; nothing may reach the backend."""

    def __init__(self, message: Optional[str] = None, report=None):
        super().__init__(
            message
            or f"CRITICAL {SECURITY_BLOCK_MARKER}: System configuration failed safety compliance scan. Assistant disabled."
        )
        self.report = report


class BackendError(KenyaAIError):
    """The completion or image service failed or returned a malformed response."""


class MissingImageDataError(BackendError):
    def __init__(self, message: str = "No image data returned"):
        super().__init__(message)


class TestExecutionError(KenyaAIError):
    """A single edge-case test could not be executed."""

    __test__ = False

    def __init__(self, test_name: str, cause: BaseException):
        super().__init__(f"{test_name}: {cause}")
        self.test_name = test_name
        self.cause = cause
