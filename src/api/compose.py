from typing import Any, List, Optional
import logging

import httpx

from config import ApiConfig
from models.exceptions import (
    ComposeParseError,
    ComposeRequestError,
    ComposeResponseError,
)
from models.whitelist_models import (
    AddWhitelistPayload,
    WhitelistEntry,
    WhitelistInput,
    WhitelistListResponse,
)


class Compose:
    """Client for the whitelist endpoints of the Compose REST API.

    Writes are acknowledged asynchronously by Compose (a recipe is queued),
    so nothing returned by `add_whitelist` or `delete_whitelist` can be
    trusted as the new state. Callers re-read with `get_whitelist`.
    """

    def __init__(self, access_token: str, api_config: ApiConfig):
        """
        Initialize the Compose API client.

        Args:
            access_token: Compose API token
            api_config: Configuration object containing URL, timeout, SSL settings
        """
        self._access_token = access_token
        self._api_config = api_config
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logging.getLogger(__name__)

    async def __aenter__(self):
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f"Bearer {self._access_token}"
        }
        # Created here so it binds to the currently running event loop.
        self._client = httpx.AsyncClient(
            base_url=self._api_config.compose_server,
            headers=headers,
            timeout=self._api_config.timeout,
            verify=self._api_config.use_ssl
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._client.aclose()

    async def add_whitelist(self, deployment_id: str, whitelist: WhitelistInput) -> Any:
        """
        Requests a new whitelist entry for a deployment.

        Args:
            deployment_id: Target deployment.
            whitelist: Validated ip/description pair.

        Returns:
            The raw acknowledgement (a Compose recipe). It does not contain
            the ID of the new entry.

        Raises:
            ComposeRequestError: When the HTTP request fails
            ComposeParseError: When response parsing fails
        """
        payload = AddWhitelistPayload.from_input(whitelist)
        response = await self._client.post(
            f"/deployments/{deployment_id}/whitelist",
            json=payload.model_dump(mode='json')
        )
        self._raise_for_status(response)
        return self._parse_json(response)

    async def delete_whitelist(self, deployment_id: str, whitelist_id: str) -> Any:
        """
        Requests removal of a whitelist entry.

        Returns:
            The raw acknowledgement (a Compose recipe).
        """
        response = await self._client.delete(
            f"/deployments/{deployment_id}/whitelist/{whitelist_id}"
        )
        self._raise_for_status(response)
        return self._parse_json(response)

    async def get_whitelist(self, deployment_id: str) -> List[WhitelistEntry]:
        """
        Lists every whitelist entry currently visible for a deployment.

        Raises:
            ComposeRequestError: When the HTTP request fails
            ComposeParseError: When the body is not JSON
            ComposeResponseError: When the body does not have the expected structure
        """
        response = await self._client.get(f"/deployments/{deployment_id}/whitelist")
        self._raise_for_status(response)
        response_json = self._parse_json(response)

        try:
            listing = WhitelistListResponse.model_validate(response_json)
        except Exception as e:
            raise ComposeResponseError(
                f"Unexpected response structure: {response_json}"
            ) from e

        entries = listing.embedded.whitelist
        self.logger.debug(f"Whitelist do deployment {deployment_id}: {len(entries)} entradas.")
        return entries

    def _raise_for_status(self, response: httpx.Response) -> None:
        if not 200 <= response.status_code < 300:
            raise ComposeRequestError(response.status_code, response.text)

    def _parse_json(self, response: httpx.Response) -> Any:
        # Writes may be acknowledged with an empty body (204)
        if not response.content:
            return None
        try:
            return response.json()
        except Exception:
            raise ComposeParseError(response)
