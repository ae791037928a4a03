"""Exceptions raised by PyCMS."""

from typing import Optional


class CmsError(Exception):
    """Base class for all PyCMS errors."""


class CmsConfigError(CmsError):
    """Configuration is missing, unreadable or malformed."""


class CmsAPIError(CmsError):
    """Error returned by (or while talking to) the CMS API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CmsAuthenticationError(CmsAPIError):
    """API key rejected (HTTP 401)."""


class CmsPermissionError(CmsAPIError):
    """Access forbidden (HTTP 403)."""


class CmsNotFoundError(CmsAPIError):
    """Requested resource does not exist (HTTP 404)."""


class CmsNetworkError(CmsAPIError):
    """Connection, DNS or timeout failure."""


class CmsInvalidResponseError(CmsAPIError):
    """Server answered with something that is not the expected JSON."""


class CmsUploadError(CmsAPIError):
    """One or more files could not be uploaded."""


class LogClassificationError(CmsError):
    """A log record carries a status that is not a known outcome kind."""

    def __init__(self, status: object):
        super().__init__(f"Unknown log status: {status!r}")
        self.status = status
