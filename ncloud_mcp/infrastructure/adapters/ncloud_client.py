"""
NCP API Client Adapter

Architectural Intent:
- Implements NcloudApiPort against the NCP API gateway using httpx
- One signed HTTP request per logical action; exactly one attempt
- Normalizes every non-2xx answer or transport failure into RemoteCallError

Design Decisions:
- The path-with-query handed to the signer is the literal string placed in
  the request URL, so signing and sending can never disagree
- Query strings and form bodies keep parameter insertion order
- TLS verification is on unless the operator explicitly opts out
- No timeout unless configured; a hung gateway hangs that invocation only
- Non-JSON success bodies are returned as text rather than rejected
"""

from __future__ import annotations
import logging
from typing import Any, Iterable, Optional, Sequence
from urllib.parse import urlencode

import httpx

from ncloud_mcp.domain.entities.action import (
    VSERVER_PATH,
    VLOADBALANCER_PATH,
    CLOUDDB_PATH,
)
from ncloud_mcp.domain.errors import RemoteCallError
from ncloud_mcp.domain.services.signer import sign_request
from ncloud_mcp.domain.value_objects.credentials import Credentials

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://ncloud.apigw.ntruss.com"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def build_query(params: Optional[dict[str, str]]) -> str:
    """Form-encode params in insertion order."""
    if not params:
        return ""
    return urlencode(list(params.items()))


def build_path(
    method: str,
    base_path: str,
    endpoint: str,
    params: Optional[dict[str, str]] = None,
) -> str:
    """Compose the request path; GET carries params as a query string."""
    path = f"{base_path}{endpoint}"
    if method == "GET" and params:
        path = f"{path}?{build_query(params)}"
    return path


def indexed(field: str, values: Iterable[str]) -> dict[str, str]:
    """Expand a list into NCP's 1-indexed form: field.1, field.2, ..."""
    return {f"{field}.{i}": value for i, value in enumerate(values, start=1)}


def _compact(pairs: Iterable[tuple[str, Optional[str]]]) -> dict[str, str]:
    return {key: value for key, value in pairs if value is not None}


def _remote_message(response: httpx.Response) -> str:
    """Pull the gateway's own error message out of a failed response."""
    try:
        data = response.json()
    except ValueError:
        return ""
    if not isinstance(data, dict):
        return ""
    if data.get("message"):
        return str(data["message"])
    for key, message_key in (("error", "message"), ("responseError", "returnMessage")):
        nested = data.get(key)
        if isinstance(nested, dict) and nested.get(message_key):
            return str(nested[message_key])
    return ""


class NcloudClient:
    """
    Signed NCP API client.

    Usable as an async context manager; otherwise call aclose() when done.
    """

    def __init__(
        self,
        credentials: Credentials,
        api_url: str = DEFAULT_API_URL,
        verify_tls: bool = True,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._credentials = credentials
        self._api_url = api_url.rstrip("/")
        self._verify_tls = verify_tls
        self._timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

        if not verify_tls:
            logger.warning(
                "TLS certificate verification is disabled for %s", self._api_url
            )

    @property
    def api_url(self) -> str:
        return self._api_url

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                verify=self._verify_tls,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> NcloudClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def execute(
        self,
        method: str,
        base_path: str,
        endpoint: str,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        path = build_path(method, base_path, endpoint, params)
        signed = sign_request(method, path, self._credentials)

        headers = signed.headers(self._credentials.access_key)
        content: Optional[str] = None
        if method == "POST":
            headers["Content-Type"] = FORM_CONTENT_TYPE
            content = build_query(params)

        logger.debug("NCP request: %s %s", method, path)

        try:
            response = await self._client().request(
                method,
                f"{self._api_url}{path}",
                headers=headers,
                content=content,
            )
        except httpx.HTTPError as e:
            logger.debug("NCP transport failure on %s %s: %r", method, path, e)
            raise RemoteCallError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            message = _remote_message(response) or (
                f"Request failed with status code {response.status_code}"
            )
            logger.debug(
                "NCP request %s %s failed with %d", method, path, response.status_code
            )
            raise RemoteCallError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            return response.text

    # ===== Server =====

    async def list_servers(self, region_code: Optional[str] = None) -> Any:
        # An empty filter means unfiltered
        params = _compact([("regionCode", region_code or None)])
        return await self.execute("GET", VSERVER_PATH, "/getServerInstanceList", params)

    async def get_server_detail(self, server_instance_no: str) -> Any:
        return await self.execute(
            "GET",
            VSERVER_PATH,
            "/getServerInstanceDetail",
            {"serverInstanceNo": server_instance_no},
        )

    async def create_server(
        self,
        server_name: str,
        server_image_product_code: str,
        server_product_code: str,
        vpc_no: Optional[str] = None,
        subnet_no: Optional[str] = None,
        login_key_name: Optional[str] = None,
        server_create_count: Optional[str] = None,
    ) -> Any:
        params = _compact(
            [
                ("serverName", server_name),
                ("serverImageProductCode", server_image_product_code),
                ("serverProductCode", server_product_code),
                ("vpcNo", vpc_no),
                ("subnetNo", subnet_no),
                ("loginKeyName", login_key_name),
                ("serverCreateCount", server_create_count or "1"),
            ]
        )
        return await self.execute("POST", VSERVER_PATH, "/createServerInstances", params)

    async def delete_server(self, server_instance_no: str) -> Any:
        return await self.execute(
            "GET",
            VSERVER_PATH,
            "/terminateServerInstances",
            indexed("serverInstanceNoList", [server_instance_no]),
        )

    async def stop_server(self, server_instance_no: str) -> Any:
        return await self.execute(
            "GET",
            VSERVER_PATH,
            "/stopServerInstances",
            indexed("serverInstanceNoList", [server_instance_no]),
        )

    async def start_server(self, server_instance_no: str) -> Any:
        return await self.execute(
            "GET",
            VSERVER_PATH,
            "/startServerInstances",
            indexed("serverInstanceNoList", [server_instance_no]),
        )

    # ===== VPC =====

    async def list_vpcs(self) -> Any:
        return await self.execute("GET", VSERVER_PATH, "/getVpcList", {})

    async def create_vpc(self, vpc_name: str, ipv4_cidr_block: str) -> Any:
        return await self.execute(
            "GET",
            VSERVER_PATH,
            "/createVpc",
            {"vpcName": vpc_name, "ipv4CidrBlock": ipv4_cidr_block},
        )

    async def delete_vpc(self, vpc_no: str) -> Any:
        return await self.execute("GET", VSERVER_PATH, "/deleteVpc", {"vpcNo": vpc_no})

    # ===== Subnet =====

    async def list_subnets(self, vpc_no: Optional[str] = None) -> Any:
        params = _compact([("vpcNo", vpc_no or None)])
        return await self.execute("GET", VSERVER_PATH, "/getSubnetList", params)

    async def create_subnet(
        self,
        subnet_name: str,
        vpc_no: str,
        subnet: str,
        zone_code: str,
        network_acl_no: str,
        subnet_type_code: str,
    ) -> Any:
        params = {
            "subnetName": subnet_name,
            "vpcNo": vpc_no,
            "subnet": subnet,
            "zoneCode": zone_code,
            "networkAclNo": network_acl_no,
            "subnetTypeCode": subnet_type_code,
        }
        return await self.execute("GET", VSERVER_PATH, "/createSubnet", params)

    async def delete_subnet(self, subnet_no: str) -> Any:
        return await self.execute(
            "GET", VSERVER_PATH, "/deleteSubnet", {"subnetNo": subnet_no}
        )

    # ===== Access Control Group =====

    async def list_acgs(self, vpc_no: Optional[str] = None) -> Any:
        params = _compact([("vpcNo", vpc_no or None)])
        return await self.execute(
            "GET", VSERVER_PATH, "/getAccessControlGroupList", params
        )

    async def create_acg(
        self,
        access_control_group_name: str,
        vpc_no: str,
        access_control_group_description: Optional[str] = None,
    ) -> Any:
        params = _compact(
            [
                ("accessControlGroupName", access_control_group_name),
                ("vpcNo", vpc_no),
                ("accessControlGroupDescription", access_control_group_description),
            ]
        )
        return await self.execute(
            "GET", VSERVER_PATH, "/createAccessControlGroup", params
        )

    async def delete_acg(self, access_control_group_no: str) -> Any:
        return await self.execute(
            "GET",
            VSERVER_PATH,
            "/deleteAccessControlGroup",
            {"accessControlGroupNo": access_control_group_no},
        )

    async def add_acg_rule(
        self,
        access_control_group_no: str,
        protocol_type_code: str,
        ip_block: Optional[str] = None,
        port_range: Optional[str] = None,
        access_control_group_sequence: Optional[str] = None,
    ) -> Any:
        params = _compact(
            [
                ("accessControlGroupNo", access_control_group_no),
                ("protocolTypeCode", protocol_type_code),
                ("ipBlock", ip_block),
                ("portRange", port_range),
                ("accessControlGroupSequence", access_control_group_sequence),
            ]
        )
        return await self.execute(
            "GET", VSERVER_PATH, "/addAccessControlGroupInboundRule", params
        )

    # ===== Load Balancer =====

    async def list_load_balancers(self) -> Any:
        return await self.execute(
            "GET", VLOADBALANCER_PATH, "/getLoadBalancerInstanceList", {}
        )

    async def create_load_balancer(
        self,
        load_balancer_name: str,
        load_balancer_algorithm_type_code: str,
        load_balancer_rule_list: Optional[str] = None,
        vpc_no: Optional[str] = None,
        subnet_nos: Optional[Sequence[str]] = None,
    ) -> Any:
        params = _compact(
            [
                ("loadBalancerName", load_balancer_name),
                ("loadBalancerAlgorithmTypeCode", load_balancer_algorithm_type_code),
                ("loadBalancerRuleList", load_balancer_rule_list),
                ("vpcNo", vpc_no),
            ]
        )
        params.update(indexed("subnetNoList", subnet_nos or []))
        return await self.execute(
            "GET", VLOADBALANCER_PATH, "/createLoadBalancerInstance", params
        )

    async def delete_load_balancer(self, load_balancer_instance_no: str) -> Any:
        return await self.execute(
            "GET",
            VLOADBALANCER_PATH,
            "/deleteLoadBalancerInstances",
            indexed("loadBalancerInstanceNoList", [load_balancer_instance_no]),
        )

    async def add_load_balancer_target(
        self,
        load_balancer_instance_no: str,
        server_instance_nos: Sequence[str],
    ) -> Any:
        params = {"loadBalancerInstanceNo": load_balancer_instance_no}
        params.update(indexed("serverInstanceNoList", server_instance_nos))
        return await self.execute(
            "GET", VLOADBALANCER_PATH, "/changeLoadBalancedServerInstances", params
        )

    # ===== Cloud DB =====

    async def list_cloud_dbs(self) -> Any:
        return await self.execute("GET", CLOUDDB_PATH, "/getCloudDBInstanceList", {})

    async def create_cloud_db(
        self,
        cloud_db_service_name: str,
        cloud_db_server_name_prefix: str,
        cloud_db_server_count: str,
        cloud_db_product_code: str,
        cloud_db_image_product_code: str,
        data_storage_type_code: str,
        vpc_no: Optional[str] = None,
        subnet_no: Optional[str] = None,
    ) -> Any:
        params = _compact(
            [
                ("cloudDBServiceName", cloud_db_service_name),
                ("cloudDBServerNamePrefix", cloud_db_server_name_prefix),
                ("cloudDBServerCount", cloud_db_server_count),
                ("cloudDBProductCode", cloud_db_product_code),
                ("cloudDBImageProductCode", cloud_db_image_product_code),
                ("dataStorageTypeCode", data_storage_type_code),
                ("vpcNo", vpc_no),
                ("subnetNo", subnet_no),
            ]
        )
        return await self.execute("GET", CLOUDDB_PATH, "/createCloudDBInstance", params)

    async def delete_cloud_db(self, cloud_db_instance_no: str) -> Any:
        return await self.execute(
            "GET",
            CLOUDDB_PATH,
            "/deleteCloudDBInstance",
            {"cloudDBInstanceNo": cloud_db_instance_no},
        )
