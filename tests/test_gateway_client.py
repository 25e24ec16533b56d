"""
Tests for the gateway HTTP client
"""
import json

import httpx
import pytest

from student_gateway.preferences import InMemoryKeyValueStore, Language, PreferenceResolver, PreferenceStore
from student_gateway.services.backend_client import ErrorKind
from student_gateway.services.gateway_client import GatewayClient

GATEWAY_URL = "http://gateway.test/api/gateway"


def gateway_client(handler, mock_logger) -> GatewayClient:
    return GatewayClient(GATEWAY_URL, mock_logger, transport=httpx.MockTransport(handler))


class TestGatewayClient:

    @pytest.mark.asyncio
    async def test_posts_action_envelope(self, mock_logger):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "language": "Hindi"})

        client = gateway_client(handler, mock_logger)
        result = await client.dispatch("get-student-profile", {"uid": "u1"})
        await client.close()

        assert seen == [{"action": "get-student-profile", "payload": {"uid": "u1"}}]
        assert result.success
        assert result.data == {"success": True, "language": "Hindi"}

    @pytest.mark.asyncio
    async def test_failure_envelope_is_rebuilt(self, mock_logger):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(504, json={
                "success": False,
                "error": "Request timeout",
                "errorKind": "timeout",
                "httpStatus": 504,
                "status": 504,
                "details": "timed out",
            })

        client = gateway_client(handler, mock_logger)
        result = await client.dispatch("analyze-health", {})
        await client.close()

        assert not result.success
        assert result.error_kind == ErrorKind.TIMEOUT
        assert result.http_status == 504
        assert result.message == "Request timeout"
        assert result.details == "timed out"

    @pytest.mark.asyncio
    async def test_envelope_without_error_kind(self, mock_logger):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "Internal server error"})

        client = gateway_client(handler, mock_logger)
        result = await client.dispatch("analyze-health", {})
        await client.close()

        assert result.error_kind == ErrorKind.INTERNAL
        assert result.http_status == 500

    @pytest.mark.asyncio
    async def test_unreachable_gateway(self, mock_logger):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = gateway_client(handler, mock_logger)
        result = await client.dispatch("analyze-health", {})
        await client.close()

        assert result.error_kind == ErrorKind.UNAVAILABLE
        assert result.http_status == 503

    @pytest.mark.asyncio
    async def test_resolver_over_http(self, mock_logger):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if body["action"] == "get-student-profile":
                return httpx.Response(200, json={"success": True, "language": "Hindi"})
            return httpx.Response(200, json={"success": True})

        client = gateway_client(handler, mock_logger)
        session = InMemoryKeyValueStore({"studentId": "u1", "appLanguage": "English"})
        store = PreferenceStore(InMemoryKeyValueStore(), session, mock_logger)
        resolver = PreferenceResolver(store, client, mock_logger)

        assert await resolver.resolve() == Language.HINDI
        assert session.get("appLanguage") == "Hindi"
        await client.close()
