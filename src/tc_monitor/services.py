"""Static registry of the cloud monitoring services the datasource can route to.

Each entry is pure data. Registry order is the order results are merged in,
so new services must be appended rather than inserted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class ServiceDescriptor:
    """Declaration of a single monitored cloud product."""

    service: str
    namespace: str
    label: str
    product: str
    instance_action: str
    instance_id_field: str
    instance_alias_field: str
    dimension_name: str
    supports_zones: bool = False

    @property
    def enable_flag(self) -> str:
        # Persisted datasource settings key the toggle by service key
        return self.service


SERVICES: Tuple[ServiceDescriptor, ...] = (
    ServiceDescriptor(
        service="cvm",
        namespace="QCE/CVM",
        label="Cloud Virtual Machine",
        product="cvm",
        instance_action="DescribeInstances",
        instance_id_field="InstanceId",
        instance_alias_field="InstanceName",
        dimension_name="InstanceId",
        supports_zones=True,
    ),
    ServiceDescriptor(
        service="cdb",
        namespace="QCE/CDB",
        label="TencentDB for MySQL",
        product="cdb",
        instance_action="DescribeDBInstances",
        instance_id_field="InstanceId",
        instance_alias_field="InstanceName",
        dimension_name="InstanceId",
        supports_zones=True,
    ),
    ServiceDescriptor(
        service="clb",
        namespace="QCE/LB_PUBLIC",
        label="Cloud Load Balancer",
        product="clb",
        instance_action="DescribeLoadBalancers",
        instance_id_field="LoadBalancerVip",
        instance_alias_field="LoadBalancerName",
        dimension_name="vip",
    ),
    ServiceDescriptor(
        service="redis",
        namespace="QCE/REDIS",
        label="TencentDB for Redis",
        product="redis",
        instance_action="DescribeInstances",
        instance_id_field="InstanceId",
        instance_alias_field="InstanceName",
        dimension_name="instanceid",
    ),
    ServiceDescriptor(
        service="mongodb",
        namespace="QCE/CMONGO",
        label="TencentDB for MongoDB",
        product="mongodb",
        instance_action="DescribeDBInstances",
        instance_id_field="InstanceId",
        instance_alias_field="InstanceName",
        dimension_name="target",
    ),
    ServiceDescriptor(
        service="postgres",
        namespace="QCE/POSTGRES",
        label="TencentDB for PostgreSQL",
        product="postgres",
        instance_action="DescribeDBInstances",
        instance_id_field="DBInstanceId",
        instance_alias_field="DBInstanceName",
        dimension_name="resourceId",
    ),
    ServiceDescriptor(
        service="cdn",
        namespace="QCE/CDN",
        label="Content Delivery Network",
        product="cdn",
        instance_action="DescribeDomains",
        instance_id_field="Domain",
        instance_alias_field="Domain",
        dimension_name="domain",
    ),
    ServiceDescriptor(
        service="nat",
        namespace="QCE/NAT_GATEWAY",
        label="NAT Gateway",
        product="vpc",
        instance_action="DescribeNatGateways",
        instance_id_field="NatGatewayId",
        instance_alias_field="NatGatewayName",
        dimension_name="natId",
    ),
    ServiceDescriptor(
        service="vpngw",
        namespace="QCE/VPNGW",
        label="VPN Gateway",
        product="vpc",
        instance_action="DescribeVpnGateways",
        instance_id_field="VpnGatewayId",
        instance_alias_field="VpnGatewayName",
        dimension_name="vpnGwId",
    ),
    ServiceDescriptor(
        service="ckafka",
        namespace="QCE/CKAFKA",
        label="Cloud Kafka",
        product="ckafka",
        instance_action="DescribeInstances",
        instance_id_field="InstanceId",
        instance_alias_field="InstanceName",
        dimension_name="instanceId",
    ),
)


def index_registry(
    registry: Sequence[ServiceDescriptor], field: str
) -> Dict[str, ServiceDescriptor]:
    """Index descriptors by ``field``; duplicates are a configuration error."""

    index: Dict[str, ServiceDescriptor] = {}
    for descriptor in registry:
        key = getattr(descriptor, field)
        if key in index:
            raise ValueError(f"duplicate {field} {key!r} in service registry")
        index[key] = descriptor
    return index


_BY_SERVICE = index_registry(SERVICES, "service")
_BY_NAMESPACE = index_registry(SERVICES, "namespace")


def get_service(service: str) -> Optional[ServiceDescriptor]:
    return _BY_SERVICE.get(service)


def get_namespace(service: str) -> Optional[str]:
    descriptor = _BY_SERVICE.get(service)
    return descriptor.namespace if descriptor else None


def resolve_service_by_namespace(
    namespace: object, registry: Optional[Sequence[ServiceDescriptor]] = None
) -> Optional[str]:
    """Return the service key owning ``namespace``, or ``None`` when unknown.

    Empty, non-string and unregistered namespaces all resolve to ``None``;
    callers treat that as "nothing to do".
    """

    if not isinstance(namespace, str):
        return None
    namespace = namespace.strip()
    if registry is not None:
        for candidate in registry:
            if candidate.namespace == namespace:
                return candidate.service
        return None
    descriptor = _BY_NAMESPACE.get(namespace)
    return descriptor.service if descriptor else None
