"""Tests for request building, the HTTP transport and response decoding."""

import logging
import ssl
from typing import List

import httpx
import pytest

from cardano_env.blockchain.http import (
    HttpTransport,
    RequestData,
    content_text,
    decode,
    raise_for_api_error,
)
from cardano_env.blockchain.models import AddressUtxo
from cardano_env.errors import ApiError, DecodeError, TransportError, TransportTimeout
from tests.indexer import BASE_URL, error_response, json_response, utxo_entry


class TestRequestData:
    """Tests for URL and header construction."""

    def test_single_question_mark(self) -> None:
        request = RequestData(uri=BASE_URL, endpoint="/x", parameters="count=10&page=1")
        assert request.url.endswith("/x?count=10&page=1")
        assert request.url.count("?") == 1

    def test_leading_question_mark_in_parameters(self) -> None:
        request = RequestData(uri=BASE_URL, endpoint="/x", parameters="?count=10&page=1")
        assert request.path == "/x?count=10&page=1"

    def test_endpoint_with_existing_query(self) -> None:
        request = RequestData(uri=BASE_URL, endpoint="/x?order=asc", parameters="page=2")
        assert request.path == "/x?order=asc&page=2"

    def test_no_parameters(self) -> None:
        request = RequestData(uri=BASE_URL + "/", endpoint="/blocks/latest")
        assert request.url == "https://indexer.test/api/v0/blocks/latest"

    def test_building_url_does_not_mutate_endpoint(self) -> None:
        request = RequestData(uri=BASE_URL, endpoint="/x", parameters="page=1")
        assert request.url == request.url
        assert request.endpoint == "/x"

    def test_headers_case_insensitive_first_wins(self) -> None:
        request = RequestData(
            uri=BASE_URL,
            endpoint="/x",
            headers={"project_id": "first", "PROJECT_ID": "second", "Accept": "application/json"},
        )
        headers = request.build_headers()
        assert headers == {"project_id": "first", "Accept": "application/json"}

    def test_content_type_added_with_body(self) -> None:
        request = RequestData(uri=BASE_URL, endpoint="/x", body=b"\x84", content_type="application/cbor")
        assert request.build_headers()["Content-Type"] == "application/cbor"

    def test_explicit_content_type_header_kept(self) -> None:
        request = RequestData(
            uri=BASE_URL, endpoint="/x", body="{}", headers={"content-type": "text/plain"}
        )
        headers = request.build_headers()
        assert headers == {"content-type": "text/plain"}

    def test_defaults(self) -> None:
        request = RequestData(uri=BASE_URL, endpoint="/x")
        assert request.method == "GET"
        assert request.timeout == 120
        assert request.content_type == "application/json"


class TestHttpTransport:
    """Tests for HttpTransport.send."""

    @pytest.mark.asyncio
    async def test_sends_method_url_headers_and_body(self) -> None:
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return json_response("ok")

        transport = HttpTransport(transport=httpx.MockTransport(handler))
        request = RequestData(
            uri=BASE_URL,
            endpoint="/tx/submit",
            method="POST",
            headers={"project_id": "key"},
            body=b"\x84\xa4",
            content_type="application/cbor",
        )
        response = await transport.send(request)

        assert response.status_code == 200
        assert len(seen) == 1
        sent = seen[0]
        assert sent.method == "POST"
        assert str(sent.url) == "https://indexer.test/api/v0/tx/submit"
        assert sent.headers["project_id"] == "key"
        assert sent.headers["content-type"] == "application/cbor"
        assert sent.content == b"\x84\xa4"

    @pytest.mark.asyncio
    async def test_returns_error_responses_unchanged(self) -> None:
        transport = HttpTransport(transport=httpx.MockTransport(lambda r: error_response(400, "bad")))
        response = await transport.send(RequestData(uri=BASE_URL, endpoint="/x"))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_connect_error_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("name resolution failed", request=request)

        transport = HttpTransport(transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="failed"):
            await transport.send(RequestData(uri=BASE_URL, endpoint="/x"))

    @pytest.mark.asyncio
    async def test_timeout_becomes_transport_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        transport = HttpTransport(transport=httpx.MockTransport(handler))
        with pytest.raises(TransportTimeout):
            await transport.send(RequestData(uri=BASE_URL, endpoint="/x", timeout=5))

    @pytest.mark.asyncio
    async def test_certificate_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("handshake failed", request=request) from ssl.SSLCertVerificationError(
                "certificate verify failed: self-signed certificate"
            )

        transport = HttpTransport(transport=httpx.MockTransport(handler))
        with caplog.at_level(logging.ERROR), pytest.raises(TransportError):
            await transport.send(RequestData(uri=BASE_URL, endpoint="/x"))
        assert "Certificate error" in caplog.text

    def test_trust_all_mode_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            transport = HttpTransport(verify_certificates=False)
        assert transport.verify_certificates is False
        assert "test use only" in caplog.text

    def test_certificates_verified_by_default(self) -> None:
        assert HttpTransport().verify_certificates is True


class TestDecoding:
    """Tests for decode, content_text and raise_for_api_error."""

    def test_decode_typed(self) -> None:
        response = json_response([utxo_entry("ab" * 32, 1)])
        utxos = decode(response, List[AddressUtxo])
        assert utxos[0].tx_hash == "ab" * 32
        assert utxos[0].output_index == 1
        assert utxos[0].amount[0].unit == "lovelace"

    def test_decode_malformed_body(self) -> None:
        response = httpx.Response(200, content=b"<html>gateway</html>")
        with pytest.raises(DecodeError):
            decode(response, List[AddressUtxo])

    def test_decode_wrong_shape(self) -> None:
        with pytest.raises(DecodeError):
            decode(json_response({"unexpected": True}), List[AddressUtxo])

    def test_decode_error_is_not_transport_error(self) -> None:
        with pytest.raises(DecodeError) as info:
            decode(httpx.Response(200, content=b"{"), dict)
        assert not isinstance(info.value, TransportError)

    def test_content_text(self) -> None:
        assert content_text(httpx.Response(200, content=b"raw body")) == "raw body"

    def test_success_passes(self) -> None:
        raise_for_api_error(json_response({}))

    def test_structured_error(self) -> None:
        with pytest.raises(ApiError) as info:
            raise_for_api_error(error_response(400, "Invalid address"))
        assert info.value.status_code == 400
        assert info.value.message == "Invalid address"
        assert info.value.structured is True

    def test_unstructured_error(self) -> None:
        with pytest.raises(ApiError) as info:
            raise_for_api_error(httpx.Response(502, content=b"Bad Gateway"))
        assert info.value.status_code == 502
        assert info.value.message == "Bad Gateway"
        assert info.value.structured is False
