"""
Dispatcher Use Case

Architectural Intent:
- Entry point for every tool invocation: name + argument bag in, exactly
  one ResponseEnvelope out
- Routes through a dispatch table built once from the action catalog
- Decodes and validates arguments against the action's schema before any
  network call is made

Design Decisions:
- invoke() never raises; every failure, expected or not, becomes an error
  envelope so one bad call cannot take the server down
- Each table entry maps the catalog's camelCase fields onto the client's
  typed keyword arguments
- Stateless between invocations; safe to run concurrently
"""

import logging
import time
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional

from ncloud_mcp.domain.entities.action import ActionDescriptor
from ncloud_mcp.domain.errors import (
    InvalidArgumentError,
    MissingArgumentError,
    NcloudMCPError,
    UnknownActionError,
)
from ncloud_mcp.domain.ports.ncloud_api_port import NcloudApiPort
from ncloud_mcp.domain.services.action_catalog import ACTION_CATALOG
from ncloud_mcp.domain.value_objects.envelope import ResponseEnvelope

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], Awaitable[Any]]


def build_routes(client: NcloudApiPort) -> dict[str, Handler]:
    """Map every known action name to a call on the client."""
    return {
        # Server
        "list_servers": lambda a: client.list_servers(a.get("regionCode")),
        "get_server_detail": lambda a: client.get_server_detail(a["serverInstanceNo"]),
        "create_server": lambda a: client.create_server(
            server_name=a["serverName"],
            server_image_product_code=a["serverImageProductCode"],
            server_product_code=a["serverProductCode"],
            vpc_no=a.get("vpcNo"),
            subnet_no=a.get("subnetNo"),
            login_key_name=a.get("loginKeyName"),
            server_create_count=a.get("serverCreateCount"),
        ),
        "delete_server": lambda a: client.delete_server(a["serverInstanceNo"]),
        "stop_server": lambda a: client.stop_server(a["serverInstanceNo"]),
        "start_server": lambda a: client.start_server(a["serverInstanceNo"]),
        # VPC
        "list_vpcs": lambda a: client.list_vpcs(),
        "create_vpc": lambda a: client.create_vpc(
            vpc_name=a["vpcName"],
            ipv4_cidr_block=a["ipv4CidrBlock"],
        ),
        "delete_vpc": lambda a: client.delete_vpc(a["vpcNo"]),
        # Subnet
        "list_subnets": lambda a: client.list_subnets(a.get("vpcNo")),
        "create_subnet": lambda a: client.create_subnet(
            subnet_name=a["subnetName"],
            vpc_no=a["vpcNo"],
            subnet=a["subnet"],
            zone_code=a["zoneCode"],
            network_acl_no=a["networkAclNo"],
            subnet_type_code=a["subnetTypeCode"],
        ),
        "delete_subnet": lambda a: client.delete_subnet(a["subnetNo"]),
        # Access Control Group
        "list_acgs": lambda a: client.list_acgs(a.get("vpcNo")),
        "create_acg": lambda a: client.create_acg(
            access_control_group_name=a["accessControlGroupName"],
            vpc_no=a["vpcNo"],
            access_control_group_description=a.get("accessControlGroupDescription"),
        ),
        "delete_acg": lambda a: client.delete_acg(a["accessControlGroupNo"]),
        "add_acg_rule": lambda a: client.add_acg_rule(
            access_control_group_no=a["accessControlGroupNo"],
            protocol_type_code=a["protocolTypeCode"],
            ip_block=a.get("ipBlock"),
            port_range=a.get("portRange"),
            access_control_group_sequence=a.get("accessControlGroupSequence"),
        ),
        # Load Balancer
        "list_load_balancers": lambda a: client.list_load_balancers(),
        "create_load_balancer": lambda a: client.create_load_balancer(
            load_balancer_name=a["loadBalancerName"],
            load_balancer_algorithm_type_code=a["loadBalancerAlgorithmTypeCode"],
            load_balancer_rule_list=a.get("loadBalancerRuleList"),
            vpc_no=a.get("vpcNo"),
            subnet_nos=a.get("subnetNoList"),
        ),
        "delete_load_balancer": lambda a: client.delete_load_balancer(
            a["loadBalancerInstanceNo"]
        ),
        "add_load_balancer_target": lambda a: client.add_load_balancer_target(
            load_balancer_instance_no=a["loadBalancerInstanceNo"],
            server_instance_nos=a["serverInstanceNoList"],
        ),
        # Cloud DB
        "list_cloud_dbs": lambda a: client.list_cloud_dbs(),
        "create_cloud_db": lambda a: client.create_cloud_db(
            cloud_db_service_name=a["cloudDBServiceName"],
            cloud_db_server_name_prefix=a["cloudDBServerNamePrefix"],
            cloud_db_server_count=a["cloudDBServerCount"],
            cloud_db_product_code=a["cloudDBProductCode"],
            cloud_db_image_product_code=a["cloudDBImageProductCode"],
            data_storage_type_code=a["dataStorageTypeCode"],
            vpc_no=a.get("vpcNo"),
            subnet_no=a.get("subnetNo"),
        ),
        "delete_cloud_db": lambda a: client.delete_cloud_db(a["cloudDBInstanceNo"]),
    }


class Dispatcher:
    """
    Use Case: invoke one catalog action and wrap the outcome.

    Orchestrates:
    1. Action lookup by name
    2. Argument decoding against the action's schema
    3. The client call (sign, send, parse)
    4. Success/error envelope construction
    """

    def __init__(
        self,
        client: NcloudApiPort,
        catalog: Iterable[ActionDescriptor] = ACTION_CATALOG,
        telemetry: Optional[Any] = None,
    ) -> None:
        self._descriptors = tuple(catalog)
        self._by_name = {d.name: d for d in self._descriptors}
        if len(self._by_name) != len(self._descriptors):
            raise ValueError("Action catalog contains duplicate names")

        routes = build_routes(client)
        unrouted = [name for name in self._by_name if name not in routes]
        if unrouted:
            raise ValueError(f"No handler for actions: {', '.join(unrouted)}")
        self._routes = {name: routes[name] for name in self._by_name}
        self._telemetry = telemetry

    @property
    def descriptors(self) -> tuple[ActionDescriptor, ...]:
        return self._descriptors

    def can_route(self, name: str) -> bool:
        return name in self._routes

    async def invoke(
        self, name: str, arguments: Optional[Mapping[str, Any]]
    ) -> ResponseEnvelope:
        started = time.perf_counter()
        span = self._start_span(name)

        error: Optional[str] = None
        envelope: Optional[ResponseEnvelope] = None
        try:
            result = await self._execute(name, arguments)
            envelope = ResponseEnvelope.success(result)
        except NcloudMCPError as e:
            error = str(e)
            logger.info("Tool %s failed: %s", name, error)
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.exception("Unexpected error while running tool %s", name)
        finally:
            self._finish_telemetry(name, span, error, started)

        if envelope is None:
            return ResponseEnvelope.failure(error or "Unknown error")
        return envelope

    def _start_span(self, name: str) -> Any:
        if not self._telemetry:
            return None
        try:
            return self._telemetry.start_span(f"ncloud.{name}", {"action": name})
        except Exception:
            logger.warning("Failed to start span for %s", name, exc_info=True)
            return None

    def _finish_telemetry(
        self, name: str, span: Any, error: Optional[str], started: float
    ) -> None:
        if not self._telemetry:
            return
        duration_ms = (time.perf_counter() - started) * 1000
        try:
            self._telemetry.record_invocation(name, error is None, duration_ms)
        except Exception:
            logger.warning("Failed to record metrics for %s", name, exc_info=True)
        try:
            self._telemetry.end_span(span, error)
        except Exception:
            logger.warning("Failed to end span for %s", name, exc_info=True)

    async def _execute(self, name: str, arguments: Optional[Mapping[str, Any]]) -> Any:
        descriptor = self._by_name.get(name)
        if descriptor is None:
            raise UnknownActionError(name)
        if arguments is None:
            raise MissingArgumentError("Arguments are required")
        if not isinstance(arguments, Mapping):
            raise InvalidArgumentError("Arguments must be an object")

        decoded = descriptor.decode(arguments)
        logger.debug("Dispatching %s -> %s %s", name, descriptor.http_method, descriptor.path)
        return await self._routes[name](decoded)
