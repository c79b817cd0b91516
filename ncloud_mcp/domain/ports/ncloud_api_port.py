"""
NCP API Port

Architectural Intent:
- Port interface for issuing signed calls against the NCP API gateway
- Abstracts the HTTP client so the Dispatcher can be tested without a network
- Implemented by NcloudClient (httpx)

Design Decisions:
- Uses Protocol for structural typing (no inheritance needed)
- execute() is the generic call; the named methods are thin wrappers that
  fix base path and endpoint and flatten typed arguments into params
"""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class NcloudApiPort(Protocol):
    """Port for NCP management API calls."""

    async def execute(
        self,
        method: str,
        base_path: str,
        endpoint: str,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        """Issue one signed request and return the parsed JSON body."""
        ...

    async def list_servers(self, region_code: Optional[str] = None) -> Any: ...

    async def get_server_detail(self, server_instance_no: str) -> Any: ...

    async def create_server(
        self,
        server_name: str,
        server_image_product_code: str,
        server_product_code: str,
        vpc_no: Optional[str] = None,
        subnet_no: Optional[str] = None,
        login_key_name: Optional[str] = None,
        server_create_count: Optional[str] = None,
    ) -> Any: ...

    async def delete_server(self, server_instance_no: str) -> Any: ...

    async def stop_server(self, server_instance_no: str) -> Any: ...

    async def start_server(self, server_instance_no: str) -> Any: ...

    async def list_vpcs(self) -> Any: ...

    async def create_vpc(self, vpc_name: str, ipv4_cidr_block: str) -> Any: ...

    async def delete_vpc(self, vpc_no: str) -> Any: ...

    async def list_subnets(self, vpc_no: Optional[str] = None) -> Any: ...

    async def create_subnet(
        self,
        subnet_name: str,
        vpc_no: str,
        subnet: str,
        zone_code: str,
        network_acl_no: str,
        subnet_type_code: str,
    ) -> Any: ...

    async def delete_subnet(self, subnet_no: str) -> Any: ...

    async def list_acgs(self, vpc_no: Optional[str] = None) -> Any: ...

    async def create_acg(
        self,
        access_control_group_name: str,
        vpc_no: str,
        access_control_group_description: Optional[str] = None,
    ) -> Any: ...

    async def delete_acg(self, access_control_group_no: str) -> Any: ...

    async def add_acg_rule(
        self,
        access_control_group_no: str,
        protocol_type_code: str,
        ip_block: Optional[str] = None,
        port_range: Optional[str] = None,
        access_control_group_sequence: Optional[str] = None,
    ) -> Any: ...

    async def list_load_balancers(self) -> Any: ...

    async def create_load_balancer(
        self,
        load_balancer_name: str,
        load_balancer_algorithm_type_code: str,
        load_balancer_rule_list: Optional[str] = None,
        vpc_no: Optional[str] = None,
        subnet_nos: Optional[Sequence[str]] = None,
    ) -> Any: ...

    async def delete_load_balancer(self, load_balancer_instance_no: str) -> Any: ...

    async def add_load_balancer_target(
        self, load_balancer_instance_no: str, server_instance_nos: Sequence[str]
    ) -> Any: ...

    async def list_cloud_dbs(self) -> Any: ...

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
    ) -> Any: ...

    async def delete_cloud_db(self, cloud_db_instance_no: str) -> Any: ...
