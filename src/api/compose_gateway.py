# api/compose_gateway.py
from threading import RLock
from typing import Optional

from api.compose import Compose
from config import ApiConfig


class ComposeGateway:
    """
    Thread-safe gateway for generating authenticated Compose API clients.

    Instead of holding one shared 'Compose' instance, it stores the access
    token and configuration and manufactures a fresh, isolated client for
    every operation. The gateway is passed explicitly to whoever needs to talk
    to Compose.

    A shared httpx.AsyncClient must not outlive the event loop that created
    it, which is why each call gets its own.
    """

    def __init__(self, api_config: ApiConfig, access_token: Optional[str] = None):
        """
        Initialize the gateway with static configuration.

        Args:
            api_config: Global API settings (URL, timeouts, SSL).
            access_token: Optional token, may also be provided later.
        """
        self._access_token: Optional[str] = access_token
        self._lock = RLock()
        self.config = api_config

    def update_token(self, access_token: str) -> None:
        """
        Updates the stored authentication token.

        Args:
            access_token: The new Compose API token.
        """
        with self._lock:
            self._access_token = access_token

    def get_client(self) -> Optional[Compose]:
        """
        Constructs and returns a new Compose API client instance.

        Returns:
            Compose: A fresh instance initialized with the current token.
            None: If the gateway has not yet received a token.
        """
        with self._lock:
            if not self._access_token:
                return None

            return Compose(self._access_token, self.config)

    def is_ready(self) -> bool:
        """
        Checks if the gateway has valid credentials to issue clients.

        Returns:
            bool: True if an access token is present, False otherwise.
        """
        with self._lock:
            return bool(self._access_token)
