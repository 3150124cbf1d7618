import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TYPE_CHECKING

import httpx

from config import ReconciliationConfig
from models.exceptions import (
    ComposeError,
    ReconciliationTimeoutError,
    WhitelistReadError,
)
from models.whitelist_models import ExpectedState, PollState, WhitelistEntry
from utils.exception_translator import get_friendly_error_msg

if TYPE_CHECKING:
    from api.compose import Compose


class WhitelistReconciliationStrategy:
    """Waits for the whitelist listing to reflect a previous write.

    Compose acknowledges whitelist writes before they are visible on
    GET deployments/{id}/whitelist. This class polls the listing until the
    target entry shows up (after a create) or disappears (after a delete),
    bounded by the timings in ReconciliationConfig.

    A failed listing aborts the wait at once. Only "not there yet" is retried.

    Attributes:
        _compose_client: The API client instance.
        _config: Timeout, initial delay and poll interval.
        _sleep: Coroutine used to wait between polls.
        _clock: Monotonic clock, in seconds.
    """

    def __init__(
        self,
        compose_client: "Compose",
        config: ReconciliationConfig,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initializes the reconciliation strategy.

        Args:
            compose_client: An open Compose API client.
            config: Configuration object containing timeout and delays.
            sleep: Replacement for asyncio.sleep, mostly for tests.
            clock: Replacement for time.monotonic, mostly for tests.
        """
        self._compose_client = compose_client
        self._config = config
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic
        self._logger = logging.getLogger(__name__)

    @property
    def delay_seconds(self) -> float:
        """float: The delay in seconds to wait before the first poll."""
        return self._config.delay_seconds

    async def find_entry(
        self,
        deployment_id: str,
        key: str,
        match_field: str = "ip",
    ) -> Optional[WhitelistEntry]:
        """Lists the deployment whitelist and returns the entry matching `key`.

        Args:
            deployment_id: Deployment to list.
            key: Value to look for.
            match_field: WhitelistEntry attribute compared against `key`
                ("ip" or "id").

        Returns:
            Optional[WhitelistEntry]: The first matching entry, or None.

        Raises:
            WhitelistReadError: When the listing itself fails.
        """
        try:
            entries = await self._compose_client.get_whitelist(deployment_id)
        except (ComposeError, httpx.HTTPError) as e:
            self._logger.warning(
                f"Falha ao consultar whitelist do deployment {deployment_id}: "
                f"{get_friendly_error_msg(e)}"
            )
            raise WhitelistReadError(deployment_id, e) from e

        self._logger.debug(f"Verificando correspondência de {key} em {entries}")
        for entry in entries:
            if getattr(entry, match_field) == key:
                self._logger.debug("Correspondência encontrada")
                return entry

        self._logger.debug("Correspondência não encontrada")
        return None

    @staticmethod
    def classify(entry: Optional[WhitelistEntry], expected: ExpectedState) -> PollState:
        """Maps one poll result to the state of the wait."""
        if expected is ExpectedState.PRESENT:
            return PollState.SETTLED if entry is not None else PollState.PENDING
        return PollState.PENDING if entry is not None else PollState.ABSENT

    async def wait_for(
        self,
        deployment_id: str,
        key: str,
        expected: ExpectedState,
        match_field: str = "ip",
    ) -> Optional[str]:
        """Polls until the entry reaches the expected state.

        Sleeps the initial delay, then lists the whitelist at least every
        `min_interval_seconds` until the entry is present/absent. A new poll is
        only scheduled when it starts before the deadline, and each listing
        call is cut off at the deadline. A listing that answers after the
        deadline counts as a timeout, whatever it returned.

        Returns:
            Optional[str]: The matched entry ID when waiting for PRESENT,
                None when waiting for ABSENT.

        Raises:
            WhitelistReadError: The listing failed; no further polls are made.
            ReconciliationTimeoutError: The expected state was not observed in time.
        """
        interval = self._config.min_interval_seconds
        start = self._clock()
        deadline = start + self._config.timeout_seconds
        attempts = 0

        self._logger.info(
            f"Aguardando entrada '{key}' do deployment {deployment_id} "
            f"ficar '{expected.value}'..."
        )

        if self.delay_seconds > 0:
            await self._sleep(self.delay_seconds)

        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            try:
                entry = await asyncio.wait_for(
                    self.find_entry(deployment_id, key, match_field),
                    timeout=remaining,
                )
            except asyncio.TimeoutError:
                attempts += 1
                break
            attempts += 1

            # A listing answered past the deadline is not trusted
            if self._clock() >= deadline:
                break

            state = self.classify(entry, expected)

            if state is PollState.SETTLED:
                self._logger.info(f"Entrada {entry.id} confirmada após {attempts} consulta(s).")
                return entry.id
            if state is PollState.ABSENT:
                self._logger.info(f"Remoção de '{key}' confirmada após {attempts} consulta(s).")
                return None

            if self._clock() + interval >= deadline:
                break
            await self._sleep(interval)

        state = PollState.TIMEOUT
        elapsed = self._clock() - start
        self._logger.error(
            f"Estado '{state.value}' aguardando '{key}' no deployment {deployment_id} "
            f"({attempts} consultas, {elapsed:.1f}s)."
        )
        raise ReconciliationTimeoutError(
            deployment_id,
            key,
            expected.value,
            attempts,
            elapsed,
        )

    async def wait_until_present(self, deployment_id: str, ip: str) -> str:
        """Waits for an entry with this IP to be listed and returns its ID."""
        return await self.wait_for(deployment_id, ip, ExpectedState.PRESENT, match_field="ip")

    async def wait_until_absent(
        self,
        deployment_id: str,
        key: str,
        match_field: str = "id",
    ) -> None:
        """Waits for the entry to stop being listed.

        Matches on the entry ID by default, so a different entry reusing the
        same IP does not keep the wait pending.
        """
        await self.wait_for(deployment_id, key, ExpectedState.ABSENT, match_field=match_field)
