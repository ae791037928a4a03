"""PyCMS - CLI tool for uploading files to a CMS Design Manager."""

from .api import CmsClient
from .exceptions import (
    CmsAPIError,
    CmsAuthenticationError,
    CmsConfigError,
    CmsError,
    CmsInvalidResponseError,
    CmsNetworkError,
    CmsNotFoundError,
    CmsPermissionError,
    CmsUploadError,
    LogClassificationError,
)
from .logs import LogRecord, LogStatus, RenderOptions, render_log, render_logs

__all__ = [
    "CmsClient",
    "CmsError",
    "CmsAPIError",
    "CmsAuthenticationError",
    "CmsConfigError",
    "CmsInvalidResponseError",
    "CmsNetworkError",
    "CmsNotFoundError",
    "CmsPermissionError",
    "CmsUploadError",
    "LogClassificationError",
    "LogRecord",
    "LogStatus",
    "RenderOptions",
    "render_log",
    "render_logs",
]
