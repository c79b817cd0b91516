"""
Tests for the NCP API client adapter.

Coverage strategy
-----------------
Every request goes through a recording httpx MockTransport, so the tests
inspect exactly what would have gone on the wire:
  1. Path and query composition (none for empty GETs, ordered otherwise).
  2. Signature headers agree with the bytes on the request line.
  3. POST bodies are form encoded with the form content type.
  4. Indexed list parameters (field.1, field.2, ...).
  5. Error normalization for HTTP and transport failures.
"""

import logging
from urllib.parse import parse_qsl

import httpx
import pytest

from conftest import RecordingTransport
from ncloud_mcp.domain.errors import RemoteCallError
from ncloud_mcp.domain.ports.ncloud_api_port import NcloudApiPort
from ncloud_mcp.domain.services.signer import sign
from ncloud_mcp.domain.value_objects.signed_request import (
    ACCESS_KEY_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
)
from ncloud_mcp.infrastructure.adapters.ncloud_client import (
    DEFAULT_API_URL,
    NcloudClient,
    build_path,
    build_query,
    indexed,
)


def _client(credentials, transport, **kwargs) -> NcloudClient:
    return NcloudClient(credentials, transport=transport, **kwargs)


def _path(request: httpx.Request) -> str:
    return request.url.raw_path.decode("ascii")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_build_query_keeps_insertion_order(self):
        assert build_query({"b": "2", "a": "1"}) == "b=2&a=1"

    def test_build_query_encodes(self):
        assert build_query({"cidr": "10.0.0.0/16", "name": "a b"}) == (
            "cidr=10.0.0.0%2F16&name=a+b"
        )

    def test_build_path_get_without_params(self):
        assert build_path("GET", "/vserver/v2", "/getVpcList", {}) == "/vserver/v2/getVpcList"

    def test_build_path_post_never_has_query(self):
        assert build_path("POST", "/vserver/v2", "/x", {"a": "1"}) == "/vserver/v2/x"

    def test_indexed_is_one_based_in_order(self):
        assert indexed("serverInstanceNoList", ["A", "B"]) == {
            "serverInstanceNoList.1": "A",
            "serverInstanceNoList.2": "B",
        }

    def test_indexed_empty(self):
        assert indexed("x", []) == {}


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------


class TestRequestShape:
    def test_conforms_to_port(self, credentials, recording_transport):
        assert isinstance(_client(credentials, recording_transport), NcloudApiPort)

    @pytest.mark.asyncio
    async def test_get_without_params_has_no_query(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.list_vpcs()
        request = recording_transport.last
        assert request.method == "GET"
        assert str(request.url) == f"{DEFAULT_API_URL}/vserver/v2/getVpcList"
        assert request.url.query == b""

    @pytest.mark.asyncio
    async def test_get_with_params_uses_query(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.list_servers("KR")
        assert _path(recording_transport.last) == (
            "/vserver/v2/getServerInstanceList?regionCode=KR"
        )

    @pytest.mark.asyncio
    async def test_optional_none_is_omitted(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.list_subnets(None)
        assert _path(recording_transport.last) == "/vserver/v2/getSubnetList"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,path",
        [
            ("list_servers", "/vserver/v2/getServerInstanceList"),
            ("list_subnets", "/vserver/v2/getSubnetList"),
            ("list_acgs", "/vserver/v2/getAccessControlGroupList"),
        ],
    )
    async def test_empty_filter_is_omitted(
        self, credentials, recording_transport, method, path
    ):
        async with _client(credentials, recording_transport) as client:
            await getattr(client, method)("")
        assert _path(recording_transport.last) == path
        assert recording_transport.last.url.query == b""

    @pytest.mark.asyncio
    async def test_signature_matches_request_line(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.create_vpc("my vpc", "10.0.0.0/16")
        request = recording_transport.last
        path = _path(request)
        assert path == "/vserver/v2/createVpc?vpcName=my+vpc&ipv4CidrBlock=10.0.0.0%2F16"

        timestamp = request.headers[TIMESTAMP_HEADER]
        assert request.headers[ACCESS_KEY_HEADER] == credentials.access_key
        assert request.headers[SIGNATURE_HEADER] == sign(
            "GET", path, timestamp, credentials.access_key, credentials.secret_key
        )

    @pytest.mark.asyncio
    async def test_post_sends_form_body(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.create_server(
                server_name="web",
                server_image_product_code="IMG",
                server_product_code="PRD",
                vpc_no="100",
            )
        request = recording_transport.last
        assert request.method == "POST"
        assert _path(request) == "/vserver/v2/createServerInstances"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert parse_qsl(request.content.decode()) == [
            ("serverName", "web"),
            ("serverImageProductCode", "IMG"),
            ("serverProductCode", "PRD"),
            ("vpcNo", "100"),
            ("serverCreateCount", "1"),
        ]
        assert request.headers[SIGNATURE_HEADER] == sign(
            "POST",
            "/vserver/v2/createServerInstances",
            request.headers[TIMESTAMP_HEADER],
            credentials.access_key,
            credentials.secret_key,
        )

    @pytest.mark.asyncio
    async def test_create_server_keeps_explicit_count(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.create_server("web", "IMG", "PRD", server_create_count="3")
        assert ("serverCreateCount", "3") in parse_qsl(
            recording_transport.last.content.decode()
        )

    @pytest.mark.asyncio
    async def test_load_balancer_targets_are_indexed(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.add_load_balancer_target("LB1", ["A", "B"])
        assert _path(recording_transport.last) == (
            "/vloadbalancer/v2/changeLoadBalancedServerInstances"
            "?loadBalancerInstanceNo=LB1"
            "&serverInstanceNoList.1=A&serverInstanceNoList.2=B"
        )

    @pytest.mark.asyncio
    async def test_subnet_list_is_indexed(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.create_load_balancer("lb", "RR", subnet_nos=["s1", "s2"])
        query = parse_qsl(recording_transport.last.url.query.decode())
        assert query == [
            ("loadBalancerName", "lb"),
            ("loadBalancerAlgorithmTypeCode", "RR"),
            ("subnetNoList.1", "s1"),
            ("subnetNoList.2", "s2"),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,endpoint,key",
        [
            ("delete_server", "/vserver/v2/terminateServerInstances", "serverInstanceNoList.1"),
            ("stop_server", "/vserver/v2/stopServerInstances", "serverInstanceNoList.1"),
            ("start_server", "/vserver/v2/startServerInstances", "serverInstanceNoList.1"),
            (
                "delete_load_balancer",
                "/vloadbalancer/v2/deleteLoadBalancerInstances",
                "loadBalancerInstanceNoList.1",
            ),
        ],
    )
    async def test_single_instance_bulk_endpoints(
        self, credentials, recording_transport, method, endpoint, key
    ):
        async with _client(credentials, recording_transport) as client:
            await getattr(client, method)("123")
        assert _path(recording_transport.last) == f"{endpoint}?{key}=123"

    @pytest.mark.asyncio
    async def test_cloud_db_group(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.delete_cloud_db("DB9")
        assert _path(recording_transport.last) == (
            "/clouddb/v2/deleteCloudDBInstance?cloudDBInstanceNo=DB9"
        )

    @pytest.mark.asyncio
    async def test_custom_api_url(self, credentials, recording_transport):
        async with _client(
            credentials, recording_transport, api_url="https://ncloud.example.test/"
        ) as client:
            await client.list_vpcs()
        assert recording_transport.last.url.host == "ncloud.example.test"


# ---------------------------------------------------------------------------
# Responses and failures
# ---------------------------------------------------------------------------


class TestResponses:
    @pytest.mark.asyncio
    async def test_returns_parsed_json(self, credentials):
        transport = RecordingTransport(payload={"foo": 1})
        async with _client(credentials, transport) as client:
            assert await client.list_vpcs() == {"foo": 1}

    @pytest.mark.asyncio
    async def test_non_json_success_returned_as_text(self, credentials):
        transport = RecordingTransport(payload="<getVpcListResponse/>")
        async with _client(credentials, transport) as client:
            assert await client.list_vpcs() == "<getVpcListResponse/>"

    @pytest.mark.asyncio
    async def test_remote_message_used(self, credentials):
        transport = RecordingTransport(
            status_code=401,
            payload={"error": {"errorCode": "200", "message": "Authentication Failed"}},
        )
        async with _client(credentials, transport) as client:
            with pytest.raises(RemoteCallError) as exc_info:
                await client.list_vpcs()
        assert str(exc_info.value) == "NCP API Error: Authentication Failed"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_top_level_message_used(self, credentials):
        transport = RecordingTransport(status_code=400, payload={"message": "bad vpcNo"})
        async with _client(credentials, transport) as client:
            with pytest.raises(RemoteCallError, match="bad vpcNo"):
                await client.delete_vpc("x")

    @pytest.mark.asyncio
    async def test_response_error_return_message_used(self, credentials):
        transport = RecordingTransport(
            status_code=400,
            payload={"responseError": {"returnCode": "1", "returnMessage": "Invalid zone"}},
        )
        async with _client(credentials, transport) as client:
            with pytest.raises(RemoteCallError, match="Invalid zone"):
                await client.list_vpcs()

    @pytest.mark.asyncio
    async def test_status_fallback_message(self, credentials):
        transport = RecordingTransport(status_code=500, payload="oops")
        async with _client(credentials, transport) as client:
            with pytest.raises(RemoteCallError) as exc_info:
                await client.list_vpcs()
        assert str(exc_info.value) == "NCP API Error: Request failed with status code 500"

    @pytest.mark.asyncio
    async def test_transport_failure(self, credentials):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = RecordingTransport(handler=refuse)
        async with _client(credentials, transport) as client:
            with pytest.raises(RemoteCallError, match="connection refused"):
                await client.list_vpcs()
        assert len(transport.requests) == 1


# ---------------------------------------------------------------------------
# Client settings
# ---------------------------------------------------------------------------


class TestSettings:
    @pytest.mark.asyncio
    async def test_no_timeout_by_default(self, credentials, recording_transport):
        client = _client(credentials, recording_transport)
        http = client._client()
        assert http.timeout.connect is None
        assert http.timeout.read is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_configured_timeout(self, credentials, recording_transport):
        client = _client(credentials, recording_transport, timeout=12.5)
        assert client._client().timeout.read == 12.5
        await client.aclose()

    def test_insecure_logs_warning(self, credentials, recording_transport, caplog):
        with caplog.at_level(logging.WARNING):
            _client(credentials, recording_transport, verify_tls=False)
        assert "TLS certificate verification is disabled" in caplog.text

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self, credentials, recording_transport):
        client = _client(credentials, recording_transport)
        await client.list_vpcs()
        await client.aclose()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_secret_never_sent(self, credentials, recording_transport):
        async with _client(credentials, recording_transport) as client:
            await client.create_server("web", "IMG", "PRD")
        request = recording_transport.last
        assert credentials.secret_key not in str(request.url)
        assert credentials.secret_key not in request.content.decode()
        assert credentials.secret_key not in " ".join(request.headers.values())
