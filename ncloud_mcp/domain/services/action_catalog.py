"""
Action Catalog

Architectural Intent:
- The immutable list of NCP actions exposed as MCP tools
- Declared order is the listing order: servers, VPCs, subnets, access
  control groups, load balancers, Cloud DB
- Pure data; routing to client calls lives in the Dispatcher
"""

from ncloud_mcp.domain.entities.action import (
    ActionDescriptor,
    ParameterSpec,
    ParamType,
    VSERVER_PATH,
    VLOADBALANCER_PATH,
    CLOUDDB_PATH,
)
from ncloud_mcp.domain.errors import UnknownActionError


def _required(name: str, description: str) -> ParameterSpec:
    return ParameterSpec(name=name, description=description, required=True)


def _optional(name: str, description: str) -> ParameterSpec:
    return ParameterSpec(name=name, description=description)


ACTION_CATALOG: tuple[ActionDescriptor, ...] = (
    # Server
    ActionDescriptor(
        name="list_servers",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/getServerInstanceList",
        description="List all NCP server instances",
        parameters=(_optional("regionCode", "Region code (e.g. KR, JP)"),),
    ),
    ActionDescriptor(
        name="get_server_detail",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/getServerInstanceDetail",
        description="Get details of a single server instance",
        parameters=(_required("serverInstanceNo", "Server instance number"),),
    ),
    ActionDescriptor(
        name="create_server",
        http_method="POST",
        base_path=VSERVER_PATH,
        endpoint="/createServerInstances",
        description="Create a new server instance",
        parameters=(
            _required("serverName", "Server name"),
            _required("serverImageProductCode", "Server image product code"),
            _required("serverProductCode", "Server product code"),
            _optional("vpcNo", "VPC number"),
            _optional("subnetNo", "Subnet number"),
            _optional("loginKeyName", "Login key name"),
            _optional("serverCreateCount", "Number of servers to create (default: 1)"),
        ),
    ),
    ActionDescriptor(
        name="delete_server",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/terminateServerInstances",
        description="Terminate a server instance",
        parameters=(_required("serverInstanceNo", "Server instance number to terminate"),),
    ),
    ActionDescriptor(
        name="stop_server",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/stopServerInstances",
        description="Stop a running server instance",
        parameters=(_required("serverInstanceNo", "Server instance number to stop"),),
    ),
    ActionDescriptor(
        name="start_server",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/startServerInstances",
        description="Start a stopped server instance",
        parameters=(_required("serverInstanceNo", "Server instance number to start"),),
    ),
    # VPC
    ActionDescriptor(
        name="list_vpcs",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/getVpcList",
        description="List VPCs",
    ),
    ActionDescriptor(
        name="create_vpc",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/createVpc",
        description="Create a new VPC",
        parameters=(
            _required("vpcName", "VPC name"),
            _required("ipv4CidrBlock", "IPv4 CIDR block (e.g. 10.0.0.0/16)"),
        ),
    ),
    ActionDescriptor(
        name="delete_vpc",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/deleteVpc",
        description="Delete a VPC",
        parameters=(_required("vpcNo", "VPC number"),),
    ),
    # Subnet
    ActionDescriptor(
        name="list_subnets",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/getSubnetList",
        description="List subnets",
        parameters=(_optional("vpcNo", "VPC number (optional)"),),
    ),
    ActionDescriptor(
        name="create_subnet",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/createSubnet",
        description="Create a new subnet",
        parameters=(
            _required("subnetName", "Subnet name"),
            _required("vpcNo", "VPC number"),
            _required("subnet", "Subnet CIDR (e.g. 10.0.1.0/24)"),
            _required("zoneCode", "Zone code (e.g. KR-1)"),
            _required("networkAclNo", "Network ACL number"),
            _required("subnetTypeCode", "Subnet type code (PUBLIC/PRIVATE)"),
        ),
    ),
    ActionDescriptor(
        name="delete_subnet",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/deleteSubnet",
        description="Delete a subnet",
        parameters=(_required("subnetNo", "Subnet number"),),
    ),
    # Access Control Group
    ActionDescriptor(
        name="list_acgs",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/getAccessControlGroupList",
        description="List ACGs (Access Control Groups)",
        parameters=(_optional("vpcNo", "VPC number (optional)"),),
    ),
    ActionDescriptor(
        name="create_acg",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/createAccessControlGroup",
        description="Create a new ACG",
        parameters=(
            _required("accessControlGroupName", "ACG name"),
            _required("vpcNo", "VPC number"),
            _optional("accessControlGroupDescription", "ACG description"),
        ),
    ),
    ActionDescriptor(
        name="delete_acg",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/deleteAccessControlGroup",
        description="Delete an ACG",
        parameters=(_required("accessControlGroupNo", "ACG number"),),
    ),
    ActionDescriptor(
        name="add_acg_rule",
        http_method="GET",
        base_path=VSERVER_PATH,
        endpoint="/addAccessControlGroupInboundRule",
        description="Add an inbound rule to an ACG",
        parameters=(
            _required("accessControlGroupNo", "ACG number"),
            _required("protocolTypeCode", "Protocol type (TCP/UDP/ICMP)"),
            _optional("ipBlock", "IP block (e.g. 0.0.0.0/0)"),
            _optional("portRange", "Port range (e.g. 80, 1-65535)"),
            _optional("accessControlGroupSequence", "Source ACG sequence"),
        ),
    ),
    # Load Balancer
    ActionDescriptor(
        name="list_load_balancers",
        http_method="GET",
        base_path=VLOADBALANCER_PATH,
        endpoint="/getLoadBalancerInstanceList",
        description="List load balancers",
    ),
    ActionDescriptor(
        name="create_load_balancer",
        http_method="GET",
        base_path=VLOADBALANCER_PATH,
        endpoint="/createLoadBalancerInstance",
        description="Create a new load balancer",
        parameters=(
            _required("loadBalancerName", "Load balancer name"),
            _required("loadBalancerAlgorithmTypeCode", "Algorithm type (RR/LC/SIPHS)"),
            _optional("loadBalancerRuleList", "Load balancer rule list"),
            _optional("vpcNo", "VPC number"),
            ParameterSpec(
                name="subnetNoList",
                description="Subnet number list",
                type=ParamType.STRING_ARRAY,
            ),
        ),
    ),
    ActionDescriptor(
        name="delete_load_balancer",
        http_method="GET",
        base_path=VLOADBALANCER_PATH,
        endpoint="/deleteLoadBalancerInstances",
        description="Delete a load balancer",
        parameters=(_required("loadBalancerInstanceNo", "Load balancer instance number"),),
    ),
    ActionDescriptor(
        name="add_load_balancer_target",
        http_method="GET",
        base_path=VLOADBALANCER_PATH,
        endpoint="/changeLoadBalancedServerInstances",
        description="Attach target servers to a load balancer",
        parameters=(
            _required("loadBalancerInstanceNo", "Load balancer instance number"),
            ParameterSpec(
                name="serverInstanceNoList",
                description="Server instance number list",
                type=ParamType.STRING_ARRAY,
                required=True,
            ),
        ),
    ),
    # Cloud DB
    ActionDescriptor(
        name="list_cloud_dbs",
        http_method="GET",
        base_path=CLOUDDB_PATH,
        endpoint="/getCloudDBInstanceList",
        description="List Cloud DB instances",
    ),
    ActionDescriptor(
        name="create_cloud_db",
        http_method="GET",
        base_path=CLOUDDB_PATH,
        endpoint="/createCloudDBInstance",
        description="Create a new Cloud DB instance",
        parameters=(
            _required("cloudDBServiceName", "Cloud DB service name"),
            _required("cloudDBServerNamePrefix", "Server name prefix"),
            _required("cloudDBServerCount", "Server count"),
            _required("cloudDBProductCode", "Product code"),
            _required("cloudDBImageProductCode", "Image product code"),
            _required("dataStorageTypeCode", "Storage type code"),
            _optional("vpcNo", "VPC number"),
            _optional("subnetNo", "Subnet number"),
        ),
    ),
    ActionDescriptor(
        name="delete_cloud_db",
        http_method="GET",
        base_path=CLOUDDB_PATH,
        endpoint="/deleteCloudDBInstance",
        description="Delete a Cloud DB instance",
        parameters=(_required("cloudDBInstanceNo", "Cloud DB instance number"),),
    ),
)

_BY_NAME: dict[str, ActionDescriptor] = {a.name: a for a in ACTION_CATALOG}

if len(_BY_NAME) != len(ACTION_CATALOG):
    raise RuntimeError("Action catalog contains duplicate names")


def list_descriptors() -> tuple[ActionDescriptor, ...]:
    return ACTION_CATALOG


def get_descriptor(name: str) -> ActionDescriptor:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownActionError(name) from None
