"""AniList GraphQL client.

Uses the AniList GraphQL endpoint directly via the requests library.
"""

import logging
from typing import Any, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)


class AniListAPIError(Exception):
    """Exception raised for AniList API errors.

    Args:
        message (str): Error message
        status_code (int): HTTP status code (0 when no response was received)
        errors (list[dict[str, Any]]): GraphQL error objects, if any

    Attributes:
        message (str): Error message
        status_code (int): HTTP status code
        errors (list[dict[str, Any]]): GraphQL error objects
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        errors: Optional[list[dict[str, Any]]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(self.message)

    @property
    def not_found(self) -> bool:
        """True when AniList reported the requested object as missing."""
        if self.status_code == 404:
            return True
        return any(error.get("status") == 404 for error in self.errors)


class AniListClient:
    """Generic query/mutate transport for the AniList GraphQL API.

    Args:
        url (str): GraphQL endpoint
        timeout (float, optional): Per-request timeout in seconds, None for no timeout

    Attributes:
        url (str): GraphQL endpoint
        timeout (float, optional): Per-request timeout
    """

    DEFAULT_URL = "https://graphql.anilist.co"

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or self.DEFAULT_URL
        self.timeout = timeout

    def _get_headers(self, token: Optional[str] = None) -> dict[str, str]:
        """Get standard headers for AniList requests.

        Returns:
            dict[str, str]: Headers dict, with Authorization when a token is given
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _handle_response(self, response: requests.Response) -> dict[str, Any]:
        """Handle API response and raise AniListAPIError on failure.

        AniList reports most failures as a JSON body with an ``errors`` list,
        sometimes alongside a 200 status.

        Args:
            response (requests.Response): Response from requests library

        Returns:
            dict[str, Any]: The ``data`` object of the GraphQL response

        Raises:
            AniListAPIError: If the API returns an error status or GraphQL errors
        """
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            raise AniListAPIError(
                message=response.text or "Invalid response from AniList",
                status_code=response.status_code,
            )

        errors = body.get("errors") or []
        if response.status_code >= 400 or errors:
            message = errors[0].get("message", "Unknown error") if errors else "Unknown error"
            raise AniListAPIError(
                message=message,
                status_code=response.status_code,
                errors=errors,
            )
        return body.get("data") or {}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type(requests.exceptions.ConnectionError),
        reraise=True,
    )
    def _post(self, payload: dict[str, Any], token: Optional[str]) -> requests.Response:
        """POST a GraphQL payload.

        Args:
            payload (dict[str, Any]): ``query`` and ``variables``
            token (str, optional): Bearer token

        Returns:
            requests.Response: The raw response
        """
        return requests.post(
            self.url,
            headers=self._get_headers(token),
            json=payload,
            timeout=self.timeout,
        )

    def query(
        self,
        document: str,
        variables: Optional[dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> dict[str, Any]:
        """Run a GraphQL query or mutation.

        Args:
            document (str): GraphQL document
            variables (dict[str, Any], optional): Variables for the document
            token (str, optional): Bearer token for user-scoped operations

        Returns:
            dict[str, Any]: The ``data`` object of the response

        Raises:
            AniListAPIError: If the request fails or AniList returns errors
        """
        payload = {"query": document, "variables": variables or {}}
        try:
            response = self._post(payload, token)
        except requests.exceptions.RequestException as e:
            logger.debug("AniList request failed: %s", e)
            raise AniListAPIError(f"AniList request failed: {e}") from e
        return self._handle_response(response)
