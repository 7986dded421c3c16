"""
Tests for sharding structure resolution and its retry policy.
"""
from unittest.mock import MagicMock

import pytest

from harmony_lib.config import Retry
from harmony_lib.exceptions import RPCError, TransportError
from harmony_lib.network.sharding import fetch_sharding_structure, resolve_sharding_structure
from harmony_lib.rpc.methods import Method

from conftest import TEST_NODE, FakeTransport, sequence, sharding_routes


def test_fetch_returns_typed_routes(fake_transport):
    routes = fetch_sharding_structure(TEST_NODE, fake_transport)
    assert [route.shard_id for route in routes] == [0, 1]
    assert routes[1].http == "https://api.s1.b.hmny.io"
    assert fake_transport.calls == [(Method.GET_SHARDING_STRUCTURE, TEST_NODE, [])]


@pytest.mark.parametrize("reply", ["nope", [{"http": "https://x"}]])
def test_fetch_rejects_malformed_replies(reply):
    transport = FakeTransport({Method.GET_SHARDING_STRUCTURE: reply})
    with pytest.raises(TransportError):
        fetch_sharding_structure(TEST_NODE, transport)


def test_retry_exhaustion_makes_exactly_attempts_calls():
    """A resolver that always fails is called exactly ``attempts`` times"""
    transport = FakeTransport({Method.GET_SHARDING_STRUCTURE: TransportError("connection refused")})
    sleep = MagicMock()

    with pytest.raises(TransportError) as excinfo:
        resolve_sharding_structure(TEST_NODE, Retry(attempts=3, wait=0), transport, sleep=sleep)

    assert str(excinfo.value) == "connection refused"
    assert transport.count(Method.GET_SHARDING_STRUCTURE) == 3
    assert sleep.call_count == 2


def test_retry_waits_constant_delay_between_attempts():
    transport = FakeTransport({
        Method.GET_SHARDING_STRUCTURE: sequence(TransportError("down"), TransportError("down"), sharding_routes(4)),
    })
    sleep = MagicMock()

    routes = resolve_sharding_structure(TEST_NODE, Retry(attempts=5, wait=2), transport, sleep=sleep)

    assert len(routes) == 4
    assert transport.count(Method.GET_SHARDING_STRUCTURE) == 3
    assert [c.args for c in sleep.call_args_list] == [(2,), (2,)]


def test_no_retry_policy_makes_a_single_call():
    transport = FakeTransport({Method.GET_SHARDING_STRUCTURE: TransportError("down")})
    with pytest.raises(TransportError):
        resolve_sharding_structure(TEST_NODE, Retry(), transport)
    assert transport.count(Method.GET_SHARDING_STRUCTURE) == 1


def test_rpc_errors_are_retried_and_surface_last():
    transport = FakeTransport({
        Method.GET_SHARDING_STRUCTURE: {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "busy"}},
    })
    with pytest.raises(RPCError) as excinfo:
        resolve_sharding_structure(TEST_NODE, Retry(attempts=2, wait=0), transport)
    assert excinfo.value.code == -32000
    assert transport.count(Method.GET_SHARDING_STRUCTURE) == 2


def test_retry_warnings_are_rate_limited(caplog):
    transport = FakeTransport({Method.GET_SHARDING_STRUCTURE: TransportError("down")})
    with caplog.at_level("WARNING", logger="harmony_lib.network.sharding"):
        with pytest.raises(TransportError):
            resolve_sharding_structure(TEST_NODE, Retry(attempts=4, wait=0), transport)

    retry_warnings = [r for r in caplog.records if "retrying" in r.getMessage()]
    assert len(retry_warnings) == 1
