"""
Fortie client.

Entry point wiring settings, transport, dispatcher and providers together.

Usage:
    from fortie import Fortie

    async with Fortie() as fortie:
        price_lists = await fortie.price_lists.all()
        pdf = await fortie.invoices.print(1001)
"""

import logging
from typing import Any

from .core.config import FortieSettings, get_settings
from .core.dispatcher import Dispatcher, RateLimitPolicy, RetryPolicy
from .core.transport import Transport
from .logging_config import setup_logging
from .providers import Accounts, Archive, ContractAccruals, Invoices, PriceLists

logger = logging.getLogger(__name__)


class Fortie:
    """
    Fortnox API client.

    Args:
        settings: Client settings, the process-wide settings by default
        transport: Transport to use instead of one built from ``settings``
        dispatcher: Dispatcher to use instead of one built from ``settings``
        configure_logging: Install the library log handler from
            ``settings.log_level`` and ``settings.log_json``
    """

    def __init__(
        self,
        settings: FortieSettings | None = None,
        transport: Transport | None = None,
        dispatcher: Dispatcher | None = None,
        configure_logging: bool = False,
    ) -> None:
        self.settings = settings or get_settings()
        if configure_logging:
            setup_logging(self.settings.log_level, structured=self.settings.log_json)

        if dispatcher is None:
            transport = transport or self._build_transport(self.settings)
            dispatcher = Dispatcher(
                transport,
                rate_limit_policy=RateLimitPolicy(
                    requests_per_second=self.settings.rate_limit,
                    throttle=self.settings.throttle,
                ),
                retry_policy=RetryPolicy(max_retries=self.settings.max_retries),
            )

        self.dispatcher = dispatcher
        self.transport = dispatcher.transport

        self.accounts = Accounts(dispatcher)
        self.archive = Archive(dispatcher)
        self.contract_accruals = ContractAccruals(dispatcher)
        self.invoices = Invoices(dispatcher)
        self.price_lists = PriceLists(dispatcher)

    @staticmethod
    def _build_transport(settings: FortieSettings) -> Transport:
        return Transport(
            base_url=settings.base_url,
            headers=settings.headers(),
            content_type=settings.content_type,
            timeout=settings.timeout,
        )

    async def __aenter__(self) -> "Fortie":
        await self.transport.start()
        logger.debug(f"Fortie client connected to {self.settings.base_url}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.transport.close()

    def stats(self) -> dict[str, Any]:
        return {
            "base_url": self.settings.base_url,
            "transport": self.transport.stats,
        }
