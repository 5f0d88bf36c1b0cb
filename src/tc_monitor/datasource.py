"""Datasource facade routing requests to the per-service monitoring clients.

Data queries fan out to every enabled service holding matching targets and
fail as a whole when any client fails. Connectivity tests run against every
enabled service and always report all outcomes together.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from .clients import ServiceClient
from .config import ClientConfig
from .metrics import DispatchMetricsCollector
from .models import (
    InstanceSettings,
    MetricFindValue,
    QueryRequest,
    QueryResponse,
    TestResult,
    TestStatus,
)
from .pool import ClientPool
from .query_parser import parse_metric_query
from .services import resolve_service_by_namespace

logger = logging.getLogger(__name__)

NOTHING_CONFIGURED_MESSAGE = (
    "Nothing configured. At least one of the API's services must be configured."
)


def _upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


class MonitorDatasource:
    """Single entry point over the client pool of one datasource instance."""

    def __init__(
        self,
        instance_settings: Union[InstanceSettings, Mapping[str, Any]],
        *,
        pool: Optional[ClientPool] = None,
        http: Optional[httpx.AsyncClient] = None,
        config: Optional[ClientConfig] = None,
        metrics: Optional[DispatchMetricsCollector] = None,
    ) -> None:
        if not isinstance(instance_settings, InstanceSettings):
            instance_settings = InstanceSettings.model_validate(instance_settings)
        self.instance_settings = instance_settings
        self.pool = pool or ClientPool(instance_settings, http=http, config=config)
        self.metrics = metrics

    def _record(self, operation: str, success: bool, started: float) -> None:
        if self.metrics:
            self.metrics.record_dispatch(
                operation, success, (time.perf_counter() - started) * 1000
            )

    def get_namespaces(self) -> List[str]:
        """Namespaces of the enabled services, in registry order."""

        return [
            descriptor.namespace
            for descriptor in self.pool.registry
            if self.instance_settings.is_enabled(descriptor.enable_flag)
        ]

    def get_selected_services(self) -> List[str]:
        services: List[str] = []
        for namespace in self.get_namespaces():
            service = resolve_service_by_namespace(namespace, self.pool.registry)
            if service:
                services.append(service)
        return services

    def _client_for(self, service: str) -> Optional[ServiceClient]:
        client = self.pool.get(service)
        if client is None:
            logger.warning("No client registered for service %r", service)
        return client

    async def query(
        self, request: Union[QueryRequest, Mapping[str, Any]]
    ) -> QueryResponse:
        """Fetch series for every enabled service holding targets in ``request``.

        Series are merged in registry order regardless of which client answers
        first. The first client error propagates unchanged.
        """

        if not isinstance(request, QueryRequest):
            request = QueryRequest.model_validate(request)
        started = time.perf_counter()
        success = False
        try:
            calls = []
            for service in self.get_selected_services():
                fragment = request.model_copy(deep=True)
                fragment.targets = [t for t in fragment.targets if t.service == service]
                if not fragment.targets:
                    continue
                client = self._client_for(service)
                if client is None:
                    continue
                logger.debug(
                    "Dispatching %d target(s) to %s", len(fragment.targets), service
                )
                calls.append(client.query(fragment))
            if not calls:
                success = True
                return QueryResponse(data=[])
            results = await asyncio.gather(*calls)
            success = True
            return QueryResponse(data=[series for block in results for series in block])
        finally:
            self._record("query", success, started)

    async def metric_find_query(self, query: str) -> List[MetricFindValue]:
        """Resolve template-variable options for a single namespace."""

        queries = parse_metric_query(query)
        if not queries or not queries.get("namespace") or not queries.get("action"):
            return []
        service = resolve_service_by_namespace(queries["namespace"], self.pool.registry)
        if not service:
            logger.warning("Unknown namespace in template query: %r", queries["namespace"])
            return []
        client = self._client_for(service)
        if client is None:
            return []
        result = await client.metric_find_query(queries)
        return list(result) if result else []

    async def get_regions(self, service: str) -> List[Any]:
        client = self._client_for(service)
        return await client.get_regions() if client else []

    async def get_metrics(self, service: str, region: str) -> List[Any]:
        client = self._client_for(service)
        return await client.get_metrics(region) if client else []

    async def get_zones(self, service: str, region: str) -> List[Any]:
        client = self._client_for(service)
        if client is None or not self.pool.supports_zones(service):
            return []
        return await client.get_zones(region)

    async def get_instances(
        self, service: str, region: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Any]:
        client = self._client_for(service)
        return await client.get_instances(region, params) if client else []

    async def _test_service(self, service: str) -> TestResult:
        client = self._client_for(service)
        if client is None:
            return TestResult(
                status=TestStatus.ERROR, message=f"{service}: no client registered"
            )
        try:
            result = await client.test_datasource()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Connectivity test for %s raised: %r", service, exc)
            result = TestResult(
                status=TestStatus.ERROR,
                message=f"{service} connectivity test raised {type(exc).__name__}: {exc}",
            )
        if not isinstance(result, TestResult):
            try:
                result = TestResult.model_validate(result)
            except ValidationError as exc:
                logger.warning(
                    "Connectivity test for %s returned %r", service, result
                )
                result = TestResult(
                    status=TestStatus.ERROR,
                    message=(
                        f"{service} connectivity test returned an invalid result: "
                        f"{exc.error_count()} validation error(s)"
                    ),
                )
        if self.metrics:
            self.metrics.record_connectivity(service, result.status)
        return result

    async def test_datasource(self) -> TestResult:
        """Test connectivity of every enabled service and reduce the outcomes.

        The overall status is the last non-success status reported, in
        registry order. Each service contributes a numbered message line.
        """

        started = time.perf_counter()
        services = self.get_selected_services()
        if not services:
            self._record("test", False, started)
            return TestResult(
                status=TestStatus.ERROR,
                message=NOTHING_CONFIGURED_MESSAGE,
                title="Error",
            )

        results = await asyncio.gather(*(self._test_service(s) for s in services))
        status = TestStatus.SUCCESS
        message = ""
        for index, result in enumerate(results, start=1):
            if result.status != TestStatus.SUCCESS:
                status = result.status
            message += f"{index}. {result.message}\n"
        logger.info("Connectivity test across %d service(s): %s", len(results), status)
        self._record("test", status == TestStatus.SUCCESS, started)
        return TestResult(status=status, message=message, title=_upper_first(status))
