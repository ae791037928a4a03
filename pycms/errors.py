"""User-facing reporting of API errors."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import (
    CmsAPIError,
    CmsAuthenticationError,
    CmsNetworkError,
    CmsNotFoundError,
    CmsPermissionError,
)
from .output import OutputFormatter

logger = logging.getLogger(__name__)


@dataclass
class ApiErrorContext:
    """What was being attempted when an API call failed."""

    account_id: Optional[int] = None
    request: Optional[str] = None
    """Remote path or endpoint"""

    payload: Optional[str] = None
    """Local file that was being sent"""


def _describe(error: BaseException) -> str:
    return getattr(error, "message", None) or str(error) or type(error).__name__


def log_api_upload_error(
    out: OutputFormatter, error: BaseException, context: ApiErrorContext
) -> None:
    """Report a failed file upload with its account and path context.

    Args:
        out: Output formatter
        error: The exception raised by the client
        context: Account, remote path and local file of the upload
    """
    logger.debug("Upload error", exc_info=error)
    target = f'"{context.payload}"' if context.payload else "the file"
    where = f' to "{context.request}"' if context.request else ""
    account = f" in account {context.account_id}" if context.account_id else ""

    if isinstance(error, CmsAuthenticationError):
        out.error(
            f"Upload of {target} was rejected: the API key for account "
            f"{context.account_id} is invalid or expired."
        )
    elif isinstance(error, CmsPermissionError):
        out.error(
            f"You do not have permission to upload {target}{where}{account}."
        )
    elif isinstance(error, CmsNotFoundError):
        out.error(f"The upload destination{where} could not be found{account}.")
    elif isinstance(error, CmsAPIError):
        out.error(
            f"The file {target} could not be uploaded{where}: {_describe(error)}"
        )
    else:
        log_error(out, error, {"account_id": context.account_id})


def log_error(
    out: OutputFormatter,
    error: BaseException,
    context: Optional[dict[str, Any]] = None,
) -> None:
    """Report an error without upload-specific context.

    Args:
        out: Output formatter
        error: The exception to report
        context: Extra key/value context, shown in debug logs
    """
    logger.debug(f"Error context: {context or {}}", exc_info=error)
    if isinstance(error, CmsNetworkError):
        out.error(f"A network error occurred: {_describe(error)}")
    elif isinstance(error, CmsAPIError) and error.status_code:
        out.error(
            f"The request failed with status {error.status_code}: "
            f"{_describe(error)}"
        )
    else:
        out.error(f"An error occurred: {_describe(error)}")
