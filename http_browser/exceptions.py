"""
Custom exception classes for the HTTP browser.

Exceptions are raised by helpers (URL validation, response parsing,
filesystem and cookie store access) and caught at the engine boundary,
where their detail is appended to the engine's error log.
"""


class BrowserError(Exception):
    """Base exception for browser errors."""

    def __init__(self, detail: str, error_code: str | None = None):
        self.detail = detail
        self.error_code = error_code
        super().__init__(detail)


class URLValidationError(BrowserError):
    """Exception raised when a URL cannot be used for a request."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, error_code="INVALID_URL")


class ResponseParseError(BrowserError):
    """Exception raised when a raw HTTP response has no readable status line."""

    def __init__(self, detail: str = "malformed response"):
        super().__init__(detail=detail, error_code="MALFORMED_RESPONSE")


class FileSystemError(BrowserError):
    """Exception raised when a directory or file cannot be created or written."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, error_code="FILESYSTEM_ERROR")


class CookieStoreError(BrowserError):
    """Exception raised when cookie rows cannot be loaded or saved."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, error_code="COOKIE_STORE_ERROR")


class HistoryError(BrowserError):
    """Exception raised when a history record cannot be saved."""

    def __init__(self, detail: str = "Database error occurred"):
        super().__init__(detail=detail, error_code="HISTORY_ERROR")
