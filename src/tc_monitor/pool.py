from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, Optional, Sequence

import httpx

from .clients import HttpServiceClient, ServiceClient
from .config import ClientConfig
from .errors import ClientKeyCollisionError
from .models import InstanceSettings
from .services import SERVICES, ServiceDescriptor, index_registry

logger = logging.getLogger(__name__)

ClientFactory = Callable[
    [ServiceDescriptor, InstanceSettings, httpx.AsyncClient, ClientConfig],
    ServiceClient,
]


def client_key(service: str) -> str:
    """Derive the pool key for a service, e.g. ``cvm`` -> ``CVMDatasource``."""

    return f"{service.upper()}Datasource"


def _default_factory(
    descriptor: ServiceDescriptor,
    instance_settings: InstanceSettings,
    http: httpx.AsyncClient,
    config: ClientConfig,
) -> ServiceClient:
    return HttpServiceClient(descriptor, instance_settings, http, config)


class ClientPool:
    """One client per registered service, wired once per datasource instance.

    Construction only builds objects; no request is sent until an operation
    is invoked on a client.
    """

    def __init__(
        self,
        instance_settings: InstanceSettings,
        *,
        http: Optional[httpx.AsyncClient] = None,
        config: Optional[ClientConfig] = None,
        factory: Optional[ClientFactory] = None,
        registry: Sequence[ServiceDescriptor] = SERVICES,
    ) -> None:
        self.instance_settings = instance_settings
        self.registry: Sequence[ServiceDescriptor] = tuple(registry)
        index_registry(self.registry, "namespace")
        self.config = config or ClientConfig()
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient()
        build = factory or _default_factory

        self._clients: Dict[str, ServiceClient] = {}
        self._zone_capable: Dict[str, bool] = {}
        owners: Dict[str, str] = {}
        for descriptor in self.registry:
            key = client_key(descriptor.service)
            if key in owners:
                raise ClientKeyCollisionError(key, owners[key], descriptor.service)
            owners[key] = descriptor.service
            client = build(descriptor, instance_settings, self.http, self.config)
            self._clients[key] = client
            self._zone_capable[key] = bool(getattr(client, "supports_zones", False))
        logger.debug("Client pool wired for %d services", len(self._clients))

    def get(self, service: str) -> Optional[ServiceClient]:
        return self._clients.get(client_key(service))

    def supports_zones(self, service: str) -> bool:
        return self._zone_capable.get(client_key(service), False)

    def keys(self) -> Iterator[str]:
        return iter(self._clients)

    def __len__(self) -> int:
        return len(self._clients)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()
