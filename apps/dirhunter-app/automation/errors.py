"""
Error taxonomy for DirHunter.

Only ConstructionFailure aborts a whole run. Everything else is isolated to
the directory (or the single field) it happened on.
"""

from typing import Optional


class DirHunterError(Exception):
    """Base class for all DirHunter errors."""


class NavigationFailure(DirHunterError):
    """Page could not be loaded. Fatal for the current directory only."""

    def __init__(self, url: str, cause: str):
        self.url = url
        self.cause = cause
        super().__init__(f"{cause} ({url})")


class FieldNotFound(DirHunterError):
    """A mapped field's selector matched nothing. The field is skipped."""

    def __init__(self, key: str, selector: str):
        self.key = key
        self.selector = selector
        super().__init__(f"Field '{key}' not found: {selector}")


class FieldFillFailed(DirHunterError):
    """A mapped field exists but the browser refused the value. The field is skipped."""

    def __init__(self, key: str, selector: str, cause: str):
        self.key = key
        self.selector = selector
        self.cause = cause
        super().__init__(f"Field '{key}' could not be filled ({selector}): {cause[:100]}")


class RevealControlNotFound(DirHunterError):
    """No tier of the reveal-control chain found a clickable element."""

    def __init__(self, snippet: str):
        self.snippet = snippet
        super().__init__(f"Could not find reveal control: {snippet[:80]}")


class SubmitButtonNotFound(DirHunterError):
    """The submit selector matched nothing."""

    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"Submit button not found: {selector}")


class ConstructionFailure(DirHunterError):
    """Browser or page could not be acquired. Aborts the entire run."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


# Chromium net error codes -> readable causes, checked in order
NAVIGATION_ERROR_CAUSES = [
    ("ERR_CERT", "SSL certificate error"),
    ("ERR_NAME_NOT_RESOLVED", "Domain not found"),
    ("ERR_CONNECTION_REFUSED", "Connection refused"),
    ("ERR_CONNECTION_TIMED_OUT", "Connection timed out"),
    ("Timeout", "Connection timed out"),
    ("ERR_ABORTED", "Page load aborted"),
    ("Target page, context or browser has been closed", "Browser was closed"),
    ("ERR_TOO_MANY_REDIRECTS", "Too many redirects"),
    ("ERR_EMPTY_RESPONSE", "Empty response from server"),
]


def describe_navigation_error(error_str: str) -> str:
    """
    Turn a raw navigation error message into a short human-readable cause.

    Args:
        error_str: str() of the exception raised by the browser

    Returns:
        Readable cause, or the raw message cut to 100 characters
    """
    for marker, cause in NAVIGATION_ERROR_CAUSES:
        if marker in error_str:
            return cause
    return error_str[:100]
