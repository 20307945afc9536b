"""
Tests for the Fortie client facade.
"""

import pytest

from conftest import make_response, sent_json
from fortie import Fortie, FortieSettings
from fortie.core.exceptions import ConfigurationError
from fortie.providers import PriceLists


@pytest.fixture
def settings():
    return FortieSettings(
        access_token="token",
        client_secret="secret",
        rate_limit=2,
        max_retries=5,
        throttle=True,
    )


class TestFortie:
    """Tests for Fortie."""

    def test_dispatcher_built_from_settings(self, settings, transport):
        fortie = Fortie(settings=settings, transport=transport)

        assert fortie.dispatcher.transport is transport
        assert fortie.dispatcher.rate_limit_policy.requests_per_second == 2
        assert fortie.dispatcher.rate_limit_policy.throttle is True
        assert fortie.dispatcher.retry_policy.max_retries == 5

    def test_providers_share_dispatcher(self, settings, transport):
        fortie = Fortie(settings=settings, transport=transport)

        assert isinstance(fortie.price_lists, PriceLists)
        for provider in (
            fortie.accounts,
            fortie.archive,
            fortie.contract_accruals,
            fortie.invoices,
            fortie.price_lists,
        ):
            assert provider.dispatcher is fortie.dispatcher

    def test_custom_dispatcher(self, settings, dispatcher, transport):
        fortie = Fortie(settings=settings, dispatcher=dispatcher)
        assert fortie.dispatcher is dispatcher
        assert fortie.transport is transport

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationError):
            Fortie(settings=FortieSettings(access_token=None, client_secret=None))

    def test_builds_transport(self, settings):
        fortie = Fortie(settings=settings)
        assert fortie.transport.base_url == "https://api.fortnox.se/3/"
        assert fortie.transport.default_headers["Client-Secret"] == "secret"

    @pytest.mark.asyncio
    async def test_context_manager(self, settings, transport):
        async with Fortie(settings=settings, transport=transport) as fortie:
            transport.start.assert_awaited_once()
            assert fortie.stats()["transport"] == transport.stats
        transport.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_price_list(self, settings, transport):
        transport.request.return_value = make_response(
            201, {"PriceList": {"Code": "A1", "Description": "desc"}}
        )

        async with Fortie(settings=settings, transport=transport) as fortie:
            result = await fortie.price_lists.create(
                {"Code": "A1", "Description": "desc", "Extra": "drop-me"}
            )

        assert result == {"PriceList": {"Code": "A1", "Description": "desc"}}
        assert sent_json(transport) == {"PriceList": {"Code": "A1", "Description": "desc"}}
