"""
Tests for shard client resolution and the network's topology cache.
"""
import threading

import pytest

from harmony_lib.config import Retry
from harmony_lib.exceptions import ConfigurationError, ShardNotFoundError, TransportError
from harmony_lib.models import ShardRoute
from harmony_lib.network import Network, client_for, is_local_node, new_rpc_client
from harmony_lib.network.utils import generate_node_address
from harmony_lib.rpc.methods import Method

from conftest import FakeTransport, sharding_routes


@pytest.mark.parametrize("node,expected", [
    ("localhost:9500", True),
    ("http://localhost:9500", True),
    ("https://127.0.0.1:9500", True),
    ("http://10.1.2.3", True),
    ("https://api.s0.t.hmny.io", False),
    ("", False),
])
def test_is_local_node(node, expected):
    assert is_local_node(node) is expected


def test_generate_node_address():
    assert generate_node_address("mainnet", "api", 2) == "https://api.s2.t.hmny.io"
    assert generate_node_address("mainnet", "local", 2) == "http://localhost:9500"


def test_local_node_bypasses_topology_resolution():
    transport = FakeTransport()
    network = Network(name="testnet", node="localhost:9500", transport=transport)

    client = network.rpc_client(3)

    assert client.endpoint == "localhost:9500"
    assert transport.calls == []


def test_local_shard_node_is_used_directly():
    transport = FakeTransport()
    network = Network(name="localnet", transport=transport)

    client = network.rpc_client(1)

    assert client.endpoint == "http://localhost:9501"
    assert Method.GET_SHARDING_STRUCTURE not in transport.methods()


def test_fixed_node_serves_every_shard(fake_transport):
    network = Network(name="mainnet", node="https://my-node.example.com", transport=fake_transport)
    assert network.rpc_client(0) is network.rpc_client(1)
    assert network.rpc_client(1).endpoint == "https://my-node.example.com"
    assert fake_transport.calls == []


def test_route_lookup_uses_declared_endpoint(network, fake_transport):
    client = network.rpc_client(1)

    assert client.endpoint == "https://api.s1.b.hmny.io"
    assert fake_transport.calls == [(Method.GET_SHARDING_STRUCTURE, "https://api.s1.b.hmny.io", [])]


def test_clients_and_topology_are_cached(network, fake_transport):
    first = network.rpc_client(0)
    assert network.rpc_client(0) is first
    network.rpc_client(1)

    assert fake_transport.count(Method.GET_SHARDING_STRUCTURE) == 1
    assert network.shard_count == 2
    assert network.shards_to_map() == {0: "https://api.s0.b.hmny.io", 1: "https://api.s1.b.hmny.io"}


def test_route_miss_raises_shard_not_found(network):
    with pytest.raises(ShardNotFoundError) as excinfo:
        network.rpc_client(7)
    assert excinfo.value.shard_id == 7


def test_new_rpc_client_route_miss():
    routes = [ShardRoute(shard_id=0, http="https://api.s0.b.hmny.io")]
    assert new_rpc_client("https://api.s0.b.hmny.io", 0, routes).endpoint == "https://api.s0.b.hmny.io"
    with pytest.raises(ShardNotFoundError):
        new_rpc_client("https://api.s0.b.hmny.io", 1, routes)


def test_first_non_empty_structure_wins(network):
    routes = [ShardRoute(shard_id=0, http="https://a")]
    assert not network.set_sharding_structure([])
    assert network.set_sharding_structure(routes)
    assert not network.set_sharding_structure([ShardRoute(shard_id=0, http="https://b")])
    assert network.sharding_structure[0].http == "https://a"

    network.clear_sharding_structure()
    assert network.sharding_structure == []
    assert network.shards == {}


def test_transport_failure_during_resolution_propagates():
    transport = FakeTransport({Method.GET_SHARDING_STRUCTURE: TransportError("unreachable")})
    network = Network(name="mainnet", retry=Retry(attempts=2, wait=0), transport=transport)

    with pytest.raises(TransportError):
        client_for(network, 0)
    assert transport.count(Method.GET_SHARDING_STRUCTURE) == 2
    assert network.sharding_structure == []


def test_concurrent_lookups_resolve_topology_once(network, fake_transport):
    errors = []

    def lookup(shard_id):
        try:
            network.rpc_client(shard_id)
        except Exception as e:  # pragma: no cover
            errors.append(e)

    threads = [threading.Thread(target=lookup, args=(i % 2,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert fake_transport.count(Method.GET_SHARDING_STRUCTURE) == 1


def test_generate_shard_setup_api_mode(network):
    shards = network.generate_shard_setup()
    assert sorted(shards) == [0, 1]
    assert shards[1].rpc_client.endpoint == "https://api.s1.b.hmny.io"


def test_generate_shard_setup_custom_mode_checks_node_count():
    transport = FakeTransport({Method.GET_SHARDING_STRUCTURE: sharding_routes(2)})
    network = Network(name="testnet", mode="custom", transport=transport)

    with pytest.raises(ConfigurationError):
        network.generate_shard_setup(nodes=["https://n0.example.com"])

    shards = network.generate_shard_setup(nodes=["https://n0.example.com", "https://n1.example.com"])
    assert shards[0].node == "https://n0.example.com"
    assert shards[1].rpc_client.endpoint == "https://api.s1.b.hmny.io"


def test_resolution_does_not_hold_the_network_lock(fake_transport):
    started, release = threading.Event(), threading.Event()
    routes = sharding_routes()

    def slow_structure(_endpoint, _params):
        started.set()
        release.wait(5)
        return routes

    fake_transport.on(Method.GET_SHARDING_STRUCTURE, slow_structure)
    network = Network(name="testnet", transport=fake_transport)
    worker = threading.Thread(target=network.rpc_client, args=(1,))
    worker.start()
    try:
        assert started.wait(5)
        assert network.lock.acquire(timeout=1)
        network.lock.release()
        assert network.sharding_structure == []
    finally:
        release.set()
        worker.join(5)

    assert network.shards[1].rpc_client.endpoint == "https://api.s1.b.hmny.io"


def test_balances_on_a_fresh_network_cover_every_shard(network, fake_transport):
    fake_transport.on(Method.GET_BALANCE, hex(10 ** 18))
    address = "0x1234567890123456789012345678901234567890"

    assert network.total_balance(address) == 2
    assert network.all_shard_balances(address) == {0: 1, 1: 1}
    assert fake_transport.count(Method.GET_SHARDING_STRUCTURE) == 1
