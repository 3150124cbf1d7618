import logging
from typing import Awaitable, Callable, Optional

import httpx

from api.compose import Compose
from api.compose_gateway import ComposeGateway
from api.reconciliation import WhitelistReconciliationStrategy
from config import ReconciliationConfig
from models.exceptions import (
    ComposeError,
    NotAuthenticatedError,
    WhitelistEntryNotFoundError,
    WhitelistWriteError,
)
from models.whitelist_models import ImportId, WhitelistInput, WhitelistState
from utils.exception_translator import get_friendly_error_msg


class WhitelistService:
    """
    Create, read, delete and import entry points for a managed whitelist entry.

    Each call opens its own Compose client through the gateway and waits for
    writes to become visible on the listing before returning.
    """

    def __init__(
        self,
        gateway: ComposeGateway,
        reconciliation_config: ReconciliationConfig,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.logger = logging.getLogger(__name__)

        # Dependency Injection
        self._gateway = gateway
        self._reconciliation_config = reconciliation_config
        self._sleep = sleep
        self._clock = clock

    async def create(self, deployment_id: str, ip: str, description: str) -> WhitelistState:
        """
        Adds a whitelist entry and waits until it is listed.

        Raises:
            pydantic.ValidationError: Invalid ip or empty description.
            WhitelistWriteError: Compose refused the write.
            WhitelistReadError: The listing failed while waiting.
            ReconciliationTimeoutError: The entry never showed up.
        """
        whitelist = WhitelistInput(ip=ip, description=description)

        async with self._get_client() as client:
            try:
                await client.add_whitelist(deployment_id, whitelist)
            except (ComposeError, httpx.HTTPError) as e:
                self.logger.error(
                    f"Falha ao adicionar {whitelist.ip} ao deployment {deployment_id}: "
                    f"{get_friendly_error_msg(e)}"
                )
                raise WhitelistWriteError("adicionar", e) from e

            strategy = self._build_strategy(client)
            entry_id = await strategy.wait_until_present(deployment_id, whitelist.ip)

            entry = await strategy.find_entry(deployment_id, entry_id, match_field="id")

        if entry is None:
            raise WhitelistEntryNotFoundError(deployment_id, entry_id)

        self.logger.info(f"Entrada {entry.id} ({entry.ip}) criada no deployment {deployment_id}.")
        return WhitelistState.from_entry(deployment_id, entry)

    async def read(self, state: WhitelistState) -> Optional[WhitelistState]:
        """
        Refreshes a known entry from the listing.

        Returns:
            WhitelistState: Current ip/description of the entry.
            None: The entry no longer exists; the caller should forget it.
        """
        async with self._get_client() as client:
            strategy = self._build_strategy(client)
            entry = await strategy.find_entry(state.deployment_id, state.id, match_field="id")

        if entry is None:
            self.logger.warning(
                f"Entrada {state.id} ausente no deployment {state.deployment_id}. "
                "Removendo do estado."
            )
            return None

        return WhitelistState.from_entry(state.deployment_id, entry)

    async def delete(self, state: WhitelistState) -> None:
        """
        Removes an entry and waits until it is no longer listed.
        """
        if not state.id:
            raise WhitelistEntryNotFoundError(state.deployment_id, state.ip)

        async with self._get_client() as client:
            try:
                await client.delete_whitelist(state.deployment_id, state.id)
            except (ComposeError, httpx.HTTPError) as e:
                self.logger.error(
                    f"Falha ao remover {state.id} do deployment {state.deployment_id}: "
                    f"{get_friendly_error_msg(e)}"
                )
                raise WhitelistWriteError("remover", e) from e

            strategy = self._build_strategy(client)
            await strategy.wait_until_absent(state.deployment_id, state.id)

        self.logger.info(f"Entrada {state.id} removida do deployment {state.deployment_id}.")

    async def import_state(self, import_id: str) -> WhitelistState:
        """
        Adopts an existing entry given '<deployment>@<ip>'.

        Raises:
            InvalidImportIdError: Malformed import ID.
            WhitelistEntryNotFoundError: No entry with that IP.
        """
        parsed = ImportId.parse(import_id)
        self.logger.debug(f"DeploymentID: {parsed.deployment_id} IP: {parsed.ip}")

        async with self._get_client() as client:
            strategy = self._build_strategy(client)
            entry = await strategy.find_entry(parsed.deployment_id, parsed.ip, match_field="ip")

        if entry is None:
            raise WhitelistEntryNotFoundError(parsed.deployment_id, parsed.ip)

        self.logger.debug(f"Correspondência encontrada: {entry}")
        return WhitelistState.from_entry(parsed.deployment_id, entry)

    def _get_client(self) -> Compose:
        client = self._gateway.get_client()
        if client is None:
            raise NotAuthenticatedError()
        return client

    def _build_strategy(self, client: Compose) -> WhitelistReconciliationStrategy:
        return WhitelistReconciliationStrategy(
            client,
            self._reconciliation_config,
            sleep=self._sleep,
            clock=self._clock,
        )
