"""
Tests for the dispatch engine.
"""

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from conftest import make_response, sent_json
from fortie.core.dispatcher import CancellationToken, Dispatcher, RateLimitPolicy, RetryPolicy
from fortie.core.exceptions import (
    MissingRequiredAttributeError,
    RateLimitExceededError,
    RemoteServiceError,
    RequestCancelledError,
    UnsupportedContentTypeError,
)
from fortie.core.request import HttpMethod, RequestBuilder
from fortie.core.schema import AttributeSchema


RATE_LIMITED = {"message": "Too many requests"}


@pytest.fixture
def schema():
    return AttributeSchema.create(
        readable=["Url", "Code", "Description", "Comments"],
        writeable=["Code", "Description", "Comments"],
        required_create=["Code", "Description"],
    )


def create_request(data):
    return (
        RequestBuilder()
        .method("POST")
        .path("pricelists")
        .wrapper("PriceList")
        .required(["Code", "Description"])
        .data(data)
        .build()
    )


class TestPolicies:

    def test_default_delay_is_one_over_rate(self):
        policy = RetryPolicy()
        rate = RateLimitPolicy(requests_per_second=4)
        assert policy.calculate_delay(0, rate.min_interval) == 0.25
        assert policy.calculate_delay(5, rate.min_interval) == 0.25

    def test_exponential_delay_is_capped(self):
        policy = RetryPolicy(exponential_base=2.0, max_delay=1.0)
        assert policy.calculate_delay(1, 0.25) == 0.5
        assert policy.calculate_delay(10, 0.25) == 1.0

    def test_exhausted(self):
        assert RetryPolicy(max_retries=2).exhausted(2)
        assert not RetryPolicy(max_retries=2).exhausted(1)
        assert not RetryPolicy(max_retries=None).exhausted(1000)

    def test_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            RateLimitPolicy(requests_per_second=0)


class TestDispatcherSend:
    """Tests for Dispatcher.send."""

    @pytest.mark.asyncio
    async def test_get_decodes_json(self, dispatcher, transport):
        transport.request.return_value = make_response(200, {"PriceLists": []})
        request = RequestBuilder().method("GET").path("pricelists").build()

        result = await dispatcher.send(request)

        assert result == {"PriceLists": []}
        transport.request.assert_awaited_once_with(
            HttpMethod.GET, "pricelists", params={}, json=None
        )

    @pytest.mark.asyncio
    async def test_create_sends_filtered_wrapped_body(self, dispatcher, transport, schema):
        transport.request.return_value = make_response(201, {"PriceList": {"Code": "A1"}})

        await dispatcher.send(
            create_request({"Code": "A1", "Description": "desc", "Extra": "drop-me"}),
            schema,
        )

        assert sent_json(transport) == {"PriceList": {"Code": "A1", "Description": "desc"}}

    @pytest.mark.asyncio
    async def test_missing_attribute_makes_no_network_call(self, dispatcher, transport, schema):
        with pytest.raises(MissingRequiredAttributeError):
            await dispatcher.send(create_request({"Code": "A1"}), schema)

        transport.request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_without_schema_body_is_wrapped_unfiltered(self, dispatcher, transport):
        await dispatcher.send(create_request({"Code": "A1", "Extra": 1}))
        assert sent_json(transport) == {"PriceList": {"Code": "A1", "Extra": 1}}

    @pytest.mark.asyncio
    async def test_delete_with_empty_body(self, dispatcher, transport):
        transport.request.return_value = make_response(204, body=b"")
        request = RequestBuilder().method("DELETE").path("accounts", 1910).build()

        assert await dispatcher.send(request) is None

    @pytest.mark.asyncio
    async def test_unsupported_content_type(self, dispatcher, transport):
        transport.request.return_value = make_response(200, body=b"<html/>", content_type="text/html")
        request = RequestBuilder().method("GET").path("pricelists").build()

        with pytest.raises(UnsupportedContentTypeError):
            await dispatcher.send(request)

    @pytest.mark.asyncio
    async def test_put_without_data_has_no_body(self, dispatcher, transport, schema):
        request = RequestBuilder().method("PUT").path("invoices", 1001, "bookkeep").build()

        await dispatcher.send(request, schema)

        assert sent_json(transport) is None

    @pytest.mark.asyncio
    async def test_post_without_data_still_checks_required(self, dispatcher, transport, schema):
        request = (
            RequestBuilder()
            .method("POST")
            .path("pricelists")
            .required(["Code", "Description"])
            .build()
        )

        with pytest.raises(MissingRequiredAttributeError):
            await dispatcher.send(request, schema)
        transport.request.assert_not_awaited()


class TestRateLimitRetry:
    """Tests for HTTP 429 handling."""

    @pytest.mark.asyncio
    async def test_retries_once_after_quarter_second(self, dispatcher, transport, sleep):
        transport.request.side_effect = [
            make_response(429, RATE_LIMITED),
            make_response(200, {"PriceList": {"Code": "A1"}}),
        ]
        request = RequestBuilder().method("GET").path("pricelists", "A1").build()

        result = await dispatcher.send(request)

        assert result == {"PriceList": {"Code": "A1"}}
        assert transport.request.await_count == 2
        sleep.assert_awaited_once_with(0.25)

    @pytest.mark.asyncio
    async def test_retry_resends_identical_body(self, dispatcher, transport, sleep, schema):
        transport.request.side_effect = [
            make_response(429, RATE_LIMITED),
            make_response(201, {}),
        ]

        await dispatcher.send(create_request({"Code": "A1", "Description": "desc"}), schema)

        assert sent_json(transport, 0) == sent_json(transport, 1)

    @pytest.mark.asyncio
    async def test_retry_cap(self, dispatcher, transport, sleep):
        transport.request.return_value = make_response(429, RATE_LIMITED)
        request = RequestBuilder().method("GET").path("pricelists").build()

        with pytest.raises(RateLimitExceededError) as exc_info:
            await dispatcher.send(request)

        assert exc_info.value.attempts == 3
        assert transport.request.await_count == 4
        assert sleep.await_count == 3

    @pytest.mark.asyncio
    async def test_rate_limit_of_one_waits_one_second(self, transport, sleep):
        dispatcher = Dispatcher(
            transport,
            rate_limit_policy=RateLimitPolicy(requests_per_second=1),
            sleep=sleep,
        )
        transport.request.side_effect = [make_response(429, RATE_LIMITED), make_response(200, {})]

        await dispatcher.send(RequestBuilder().method("GET").path("accounts").build())

        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_throttle_spaces_requests(self, transport, sleep):
        clock = MagicMock(side_effect=[0.0, 0.1, 0.1])
        dispatcher = Dispatcher(
            transport,
            rate_limit_policy=RateLimitPolicy(requests_per_second=4, throttle=True),
            sleep=sleep,
            clock=clock,
        )
        request = RequestBuilder().method("GET").path("accounts").build()

        await dispatcher.send(request)
        sleep.assert_not_awaited()

        await dispatcher.send(request)
        assert sleep.await_args.args[0] == pytest.approx(0.15)


class TestRemoteErrors:

    @pytest.mark.asyncio
    async def test_error_envelope_translated(self, dispatcher, transport):
        transport.request.return_value = make_response(
            400,
            {"ErrorInformation": {"Error": 1, "Message": "Ogiltig parameter", "Code": 2000588}},
        )
        request = RequestBuilder().method("GET").path("pricelists", "X").build()

        with pytest.raises(RemoteServiceError) as exc_info:
            await dispatcher.send(request)

        error = exc_info.value
        assert error.error == "1"
        assert error.message == "Ogiltig parameter"
        assert error.code == 2000588
        assert error.status == 400
        assert transport.request.await_count == 1

    @pytest.mark.asyncio
    async def test_non_json_error(self, dispatcher, transport):
        transport.request.return_value = make_response(
            503, body=b"Service Unavailable", content_type="text/plain"
        )
        request = RequestBuilder().method("GET").path("pricelists").build()

        with pytest.raises(RemoteServiceError) as exc_info:
            await dispatcher.send(request)

        assert exc_info.value == RemoteServiceError("HTTP 503", "Service Unavailable", None)


class TestCancellation:

    @pytest.mark.asyncio
    async def test_cancelled_before_send(self, dispatcher, transport):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(RequestCancelledError):
            await dispatcher.send(
                RequestBuilder().method("GET").path("pricelists").build(),
                cancel_token=token,
            )

        transport.request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancelled_while_waiting_for_retry(self, transport):
        token = CancellationToken()

        async def cancelling_sleep(delay):
            token.cancel()

        dispatcher = Dispatcher(transport, sleep=cancelling_sleep)
        transport.request.return_value = make_response(429, RATE_LIMITED)

        with pytest.raises(RequestCancelledError):
            await dispatcher.send(
                RequestBuilder().method("GET").path("pricelists").build(),
                cancel_token=token,
            )

        assert transport.request.await_count == 1

    @pytest.mark.asyncio
    async def test_sleep_failure_propagates(self, transport):
        token = CancellationToken()
        sleep = AsyncMock(side_effect=RuntimeError("clock stopped"))
        dispatcher = Dispatcher(transport, sleep=sleep)
        transport.request.return_value = make_response(429, RATE_LIMITED)

        with pytest.raises(RuntimeError, match="clock stopped"):
            await dispatcher.send(
                RequestBuilder().method("GET").path("pricelists").build(),
                cancel_token=token,
            )

        assert transport.request.await_count == 1


class TestUploads:
    """Tests for file uploads."""

    @pytest.mark.asyncio
    async def test_post_upload_is_multipart(self, dispatcher, transport, tmp_path):
        invoice = tmp_path / "invoice.pdf"
        invoice.write_bytes(b"%PDF-1.4")
        transport.request.return_value = make_response(201, {"File": {"Name": "invoice.pdf"}})
        request = (
            RequestBuilder()
            .method("POST")
            .path("archive")
            .param("folderid", "root")
            .file(invoice)
            .build()
        )

        result = await dispatcher.send(request)

        assert result == {"File": {"Name": "invoice.pdf"}}
        call = transport.request.call_args
        assert call.args == (HttpMethod.POST, "archive")
        assert call.kwargs["params"] == {"folderid": "root"}
        assert isinstance(call.kwargs["data"], aiohttp.FormData)
        assert "json" not in call.kwargs

    @pytest.mark.asyncio
    async def test_put_upload_is_raw_stream(self, dispatcher, transport, tmp_path):
        attachment = tmp_path / "receipt.png"
        attachment.write_bytes(b"\x89PNG")
        request = RequestBuilder().method("PUT").path("inbox", "42").file(attachment).build()

        await dispatcher.send(request)

        data = transport.request.call_args.kwargs["data"]
        assert data.name == str(attachment)
        assert data.mode == "rb"

    @pytest.mark.asyncio
    async def test_upload_skips_schema(self, dispatcher, transport, tmp_path, schema):
        upload = tmp_path / "a.txt"
        upload.write_text("hello")
        request = (
            RequestBuilder()
            .method("POST")
            .path("archive")
            .required(["Code"])
            .file(upload)
            .build()
        )

        await dispatcher.send(request, schema)

        transport.request.assert_awaited_once()
