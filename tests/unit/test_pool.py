"""Tests for client pool wiring."""

import httpx
import pytest

from tc_monitor.clients import HttpServiceClient, ServiceClient
from tc_monitor.errors import ClientKeyCollisionError
from tc_monitor.pool import ClientPool, client_key
from tc_monitor.services import SERVICES
from helpers.factories import (
    FakeServiceClient,
    NoZoneServiceClient,
    make_descriptor,
    make_instance_settings,
)


def _no_network(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


class TestClientKey:
    def test_client_key_derivation(self):
        assert client_key("cvm") == "CVMDatasource"
        assert client_key("vpngw") == "VPNGWDatasource"

    def test_client_key_is_injective_over_registry(self):
        keys = {client_key(d.service) for d in SERVICES}
        assert len(keys) == len(SERVICES)


class TestClientPool:
    async def test_one_http_client_per_service_without_io(self):
        """Test construction wires every service and sends no request."""
        http = httpx.AsyncClient(transport=httpx.MockTransport(_no_network))
        pool = ClientPool(make_instance_settings(["cvm"]), http=http)

        assert len(pool) == len(SERVICES)
        assert list(pool.keys()) == [client_key(d.service) for d in SERVICES]
        for descriptor in SERVICES:
            client = pool.get(descriptor.service)
            assert isinstance(client, HttpServiceClient)
            assert isinstance(client, ServiceClient)
            assert client.descriptor is descriptor
            assert client.http is http
        await pool.aclose()
        assert not http.is_closed  # injected transport is owned by the caller
        await http.aclose()

    async def test_pool_owns_default_http_client(self):
        pool = ClientPool(make_instance_settings())

        await pool.aclose()

        assert pool.http.is_closed

    def test_unknown_service_returns_none(self):
        pool = ClientPool(make_instance_settings())

        assert pool.get("unknown") is None
        assert pool.supports_zones("unknown") is False

    def test_zone_capability_is_read_once_at_construction(self):
        registry = (make_descriptor("alpha"), make_descriptor("beta"), make_descriptor("gamma"))
        clients = {
            "alpha": FakeServiceClient("alpha", supports_zones=True),
            "beta": FakeServiceClient("beta"),
            "gamma": NoZoneServiceClient("gamma"),
        }
        pool = ClientPool(
            make_instance_settings(),
            factory=lambda d, *_: clients[d.service],
            registry=registry,
        )

        assert pool.supports_zones("alpha") is True
        assert pool.supports_zones("beta") is False
        assert pool.supports_zones("gamma") is False

        clients["beta"].supports_zones = True
        assert pool.supports_zones("beta") is False

    def test_registry_zone_flags_propagate_to_http_clients(self):
        pool = ClientPool(make_instance_settings())

        assert pool.supports_zones("cvm") is True
        assert pool.supports_zones("clb") is False

    def test_colliding_client_keys_are_rejected(self):
        registry = (make_descriptor("cvm"), make_descriptor("CVM", namespace="QCE/OTHER"))

        with pytest.raises(ClientKeyCollisionError) as exc_info:
            ClientPool(
                make_instance_settings(),
                factory=lambda d, *_: FakeServiceClient(d.service),
                registry=registry,
            )

        assert exc_info.value.key == "CVMDatasource"

    def test_duplicate_namespaces_are_rejected(self):
        registry = (make_descriptor("alpha"), make_descriptor("beta", namespace="QCE/ALPHA"))

        with pytest.raises(ValueError, match="duplicate namespace"):
            ClientPool(
                make_instance_settings(),
                factory=lambda d, *_: FakeServiceClient(d.service),
                registry=registry,
            )
