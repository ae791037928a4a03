"""API client for the CMS backend."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from .config import AccountConfig
from .exceptions import (
    CmsAPIError,
    CmsAuthenticationError,
    CmsConfigError,
    CmsInvalidResponseError,
    CmsNetworkError,
    CmsNotFoundError,
    CmsPermissionError,
    CmsUploadError,
)

logger = logging.getLogger(__name__)

FILE_MAPPER_API_PATH = "content/filemapper/v1"
FUNCTION_RESULTS_API_PATH = "cms/v3/functions/results"


class CmsClient:
    """Client for the file mapper and serverless function log endpoints."""

    def __init__(
        self,
        account: AccountConfig,
        api_url: str | None = None,
        timeout: float = 30.0,
    ):
        """Initialize CMS API client.

        Args:
            account: Account to authenticate as
            api_url: Override for the environment's API URL
            timeout: Request timeout in seconds (default: 30.0)
        """
        if not account.api_key:
            raise CmsConfigError(
                f"No API key configured for account {account.account_id}"
            )
        self.account = account
        self.api_key = account.api_key
        self.api_url = (api_url or account.api_url).rstrip("/")
        self.timeout = timeout
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> CmsClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _error_from_response(self, e: httpx.HTTPStatusError) -> CmsAPIError:
        """Map an HTTP error to the matching exception type.

        Args:
            e: The HTTP error exception

        Returns:
            Exception to raise
        """
        status_code = e.response.status_code

        if status_code == 401:
            return CmsAuthenticationError(
                "Invalid API key or unauthorized access", status_code=status_code
            )
        if status_code == 403:
            return CmsPermissionError(
                "Access forbidden - check your permissions", status_code=status_code
            )
        if status_code == 404:
            return CmsNotFoundError("Resource not found", status_code=status_code)

        error_msg = f"API request failed with status {status_code}"
        try:
            if e.response.content:
                error_data = e.response.json()
                if isinstance(error_data, dict):
                    msg = error_data.get("message") or error_data.get("error")
                    if msg:
                        error_msg = f"{error_msg}: {msg}"
        except ValueError:
            # Body is not JSON, keep the status-based message
            pass
        return CmsAPIError(error_msg, status_code=status_code)

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make an API request.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data ({} for empty bodies)

        Raises:
            CmsAPIError: If the request fails
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        logger.debug(f"{method} {url}")

        try:
            response = self._get_client().request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._error_from_response(e) from e
        except httpx.RequestError as e:
            raise CmsNetworkError(f"Network error: {e}") from e

        if not response.content:
            return {}

        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            raise CmsInvalidResponseError(f"Unexpected response type: {content_type}")
        try:
            return response.json()
        except ValueError as e:
            raise CmsInvalidResponseError("Invalid JSON response from server") from e

    # =========================
    # File Mapper
    # =========================

    def upload(
        self,
        account_id: int,
        local_path: Path,
        remote_path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Upload a single file to the Design Manager.

        Args:
            account_id: Target account
            local_path: Local file to send
            remote_path: Destination path (forward slashes)
            params: Extra query parameters, typically ``Mode.query``

        Returns:
            Upload response data

        Raises:
            CmsUploadError: If the local file cannot be read
            CmsAPIError: If the API rejects the upload
        """
        query = {"portalId": account_id, **(params or {})}
        endpoint = f"{FILE_MAPPER_API_PATH}/upload/{quote(remote_path.lstrip('/'))}"
        try:
            with open(local_path, "rb") as f:
                return self._request(
                    "POST",
                    endpoint,
                    params=query,
                    files={"file": (local_path.name, f)},
                )
        except OSError as e:
            raise CmsUploadError(f"Could not read {local_path}: {e}") from e

    # =========================
    # Serverless function logs
    # =========================

    def get_function_logs(
        self, account_id: int, route: str, limit: int | None = None
    ) -> Any:
        """Get execution logs for a serverless function route.

        Returns:
            Response of the form ``{"results": [...]}``
        """
        query: dict[str, Any] = {"portalId": account_id}
        if limit:
            query["limit"] = limit
        return self._request(
            "GET",
            f"{FUNCTION_RESULTS_API_PATH}/by-route/{quote(route)}",
            params=query,
        )

    def get_latest_function_log(self, account_id: int, route: str) -> Any:
        """Get the most recent execution log for a function route."""
        return self._request(
            "GET",
            f"{FUNCTION_RESULTS_API_PATH}/by-route/{quote(route)}/latest",
            params={"portalId": account_id},
        )
