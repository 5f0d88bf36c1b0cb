"""Per-service monitoring API clients.

``ServiceClient`` is the capability interface the datasource dispatches to.
``HttpServiceClient`` implements it over the cloud API, going through the
datasource proxy URL which injects credentials and signs requests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx

from .config import ClientConfig
from .errors import ServiceClientError
from .models import (
    InstanceSettings,
    MetricFindValue,
    QueryRequest,
    QueryTarget,
    TestResult,
    TestStatus,
    TimeSeries,
)
from .services import ServiceDescriptor

logger = logging.getLogger(__name__)

MONITOR_PRODUCT = "monitor"
REGION_PRODUCT = "api"


@runtime_checkable
class ServiceClient(Protocol):
    """Operations every per-service client exposes.

    ``get_zones`` is only meaningful when ``supports_zones`` is true.
    """

    supports_zones: bool

    async def query(self, request: QueryRequest) -> List[TimeSeries]: ...

    async def test_datasource(self) -> TestResult: ...

    async def metric_find_query(
        self, params: Dict[str, Any]
    ) -> Optional[List[MetricFindValue]]: ...

    async def get_regions(self) -> List[MetricFindValue]: ...

    async def get_metrics(self, region: str) -> List[Dict[str, Any]]: ...

    async def get_instances(
        self, region: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]: ...

    async def get_zones(self, region: str) -> List[MetricFindValue]: ...


def _to_ms(timestamp: Any) -> int:
    return int(float(timestamp) * 1000)


class HttpServiceClient:
    """Cloud API client bound to one service descriptor."""

    def __init__(
        self,
        descriptor: ServiceDescriptor,
        instance_settings: InstanceSettings,
        http: httpx.AsyncClient,
        config: ClientConfig | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.instance_settings = instance_settings
        self.http = http
        self.config = config or ClientConfig()
        self.supports_zones = descriptor.supports_zones

    @property
    def service(self) -> str:
        return self.descriptor.service

    async def _request(
        self,
        product: str,
        action: str,
        payload: Optional[Dict[str, Any]] = None,
        region: Optional[str] = None,
    ) -> Dict[str, Any]:
        """POST one API action through the proxy and unwrap ``Response``."""

        url = f"{self.instance_settings.url.rstrip('/')}/{product}"
        headers = {
            "X-TC-Action": action,
            "X-TC-Version": self.config.api_version,
        }
        if region:
            headers["X-TC-Region"] = region
        try:
            resp = await self.http.post(
                url,
                json=payload or {},
                headers=headers,
                timeout=self.config.timeout_ms / 1000,
            )
        except httpx.HTTPError as exc:
            raise ServiceClientError(self.service, "TransportError", str(exc)) from exc

        if resp.status_code >= 400:
            raise ServiceClientError(
                self.service, f"HTTP {resp.status_code}", resp.text[:200] or None
            )
        try:
            body = resp.json()
        except ValueError as exc:
            raise ServiceClientError(self.service, "InvalidResponse", str(exc)) from exc

        response = body.get("Response", {}) if isinstance(body, dict) else {}
        error = response.get("Error")
        if error:
            raise ServiceClientError(
                self.service,
                error.get("Code", "UnknownError"),
                error.get("Message"),
                request_id=response.get("RequestId"),
            )
        return response

    async def query(self, request: QueryRequest) -> List[TimeSeries]:
        series: List[TimeSeries] = []
        for target in request.targets:
            series.extend(await self._query_target(target, request))
        return series

    async def _query_target(
        self, target: QueryTarget, request: QueryRequest
    ) -> List[TimeSeries]:
        opts = target.service_options()
        metric = opts.get("metricName")
        region = opts.get("region") or self.config.default_region
        instances = self._dimension_sets(opts.get("dimensionObject") or {})
        if not metric or not instances:
            logger.debug(
                "Skipping incomplete %s target %s", self.service, target.ref_id
            )
            return []

        payload: Dict[str, Any] = {
            "Namespace": self.descriptor.namespace,
            "MetricName": metric,
            "Period": int(opts.get("period") or 300),
            "Instances": [{"Dimensions": dims} for dims in instances],
        }
        if request.range is not None:
            payload["StartTime"] = request.range.from_.isoformat()
            payload["EndTime"] = request.range.to.isoformat()

        response = await self._request(
            MONITOR_PRODUCT, "GetMonitorData", payload, region=region
        )
        series: List[TimeSeries] = []
        for point in response.get("DataPoints") or []:
            label = ",".join(
                str(d.get("Value")) for d in point.get("Dimensions") or []
            )
            datapoints = [
                (value, _to_ms(ts))
                for value, ts in zip(
                    point.get("Values") or [], point.get("Timestamps") or []
                )
            ]
            series.append(TimeSeries(target=f"{metric} - {label}", datapoints=datapoints))
        return series

    def _dimension_sets(self, dimension_object: Dict[str, Any]) -> List[List[Dict[str, str]]]:
        """Expand ``{"InstanceId": {"Name": ..., "Value": [...]}}`` into one
        dimension list per instance value."""

        primary = dimension_object.get(self.descriptor.dimension_name)
        if not isinstance(primary, dict):
            return []
        values = primary.get("Value")
        if isinstance(values, str):
            values = [values]
        if not values:
            return []
        name = primary.get("Name") or self.descriptor.dimension_name
        extra = [
            {"Name": d.get("Name") or key, "Value": str(d["Value"])}
            for key, d in dimension_object.items()
            if key != self.descriptor.dimension_name
            and isinstance(d, dict)
            and d.get("Value") not in (None, "")
        ]
        return [[{"Name": name, "Value": str(v)}, *extra] for v in values]

    async def test_datasource(self) -> TestResult:
        """Probe the instance-listing API; failures become an error status."""

        label = self.descriptor.label
        try:
            await self.get_instances(self.config.default_region, {"Limit": 1})
        except (ServiceClientError, httpx.HTTPError) as exc:
            logger.info("Connectivity test for %s failed: %s", self.service, exc)
            return TestResult(
                status=TestStatus.ERROR,
                message=f"{label} API connection failed: {exc}",
            )
        return TestResult(
            status=TestStatus.SUCCESS,
            message=f"{label} API connection succeeded",
        )

    async def metric_find_query(
        self, params: Dict[str, Any]
    ) -> Optional[List[MetricFindValue]]:
        action = str(params.get("action") or "")
        region = params.get("region") or self.config.default_region
        if action == "DescribeRegions":
            return await self.get_regions()
        if action == "DescribeZones":
            return await self.get_zones(region) if self.supports_zones else []
        if action == "DescribeInstances":
            instances = await self.get_instances(region, params.get("params") or {})
            alias = params.get("instancealias") or self.descriptor.instance_id_field
            return [
                MetricFindValue(
                    text=str(item.get(alias) or item.get(self.descriptor.instance_id_field)),
                    value=item.get(self.descriptor.instance_id_field),
                )
                for item in instances
            ]
        return None

    async def get_regions(self) -> List[MetricFindValue]:
        response = await self._request(
            REGION_PRODUCT, "DescribeRegions", {"Product": self.descriptor.product}
        )
        return [
            MetricFindValue(text=r.get("RegionName") or r["Region"], value=r["Region"])
            for r in response.get("RegionSet") or []
            if r.get("RegionState", "AVAILABLE") == "AVAILABLE"
        ]

    async def get_metrics(self, region: str) -> List[Dict[str, Any]]:
        response = await self._request(
            MONITOR_PRODUCT,
            "DescribeBaseMetrics",
            {"Namespace": self.descriptor.namespace},
            region=region,
        )
        return list(response.get("MetricSet") or [])

    async def get_instances(
        self, region: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        response = await self._request(
            self.descriptor.product,
            self.descriptor.instance_action,
            dict(params or {}),
            region=region,
        )
        for key in ("InstanceSet", "Items", "LoadBalancerSet", "DBInstanceSet",
                    "Domains", "NatGatewaySet", "VpnGatewaySet"):
            if key in response:
                return list(response[key] or [])
        result = response.get("Result") or {}
        return list(result.get("InstanceList") or [])

    async def get_zones(self, region: str) -> List[MetricFindValue]:
        if not self.supports_zones:
            return []
        response = await self._request(
            self.descriptor.product, "DescribeZones", {}, region=region
        )
        return [
            MetricFindValue(text=z.get("ZoneName") or z["Zone"], value=z["Zone"])
            for z in response.get("ZoneSet") or []
        ]
