"""
Tests for the HTTP transport and the RPC client.
"""
import pytest
import requests

from harmony_lib.exceptions import RPCError, TransportError
from harmony_lib.rpc import HTTPTransport, Method, RPCClient

from conftest import TEST_NODE, FakeTransport


@pytest.fixture
def transport():
    return HTTPTransport(timeout=5, retry_count=0)


def test_request_posts_json_rpc(requests_mock, transport):
    requests_mock.post(TEST_NODE, json={"jsonrpc": "2.0", "id": 1, "result": "0x10"})

    reply = transport.request(Method.BLOCK_NUMBER, TEST_NODE, [])

    assert reply["result"] == "0x10"
    body = requests_mock.last_request.json()
    assert body["method"] == "hmy_blockNumber"
    assert body["params"] == []
    assert body["jsonrpc"] == "2.0"


def test_providers_are_reused_per_endpoint(transport):
    assert transport.provider(TEST_NODE) is transport.provider(TEST_NODE)
    assert transport.provider(TEST_NODE) is not transport.provider("https://api.s1.b.hmny.io")


def test_connection_failure_is_a_transport_error(requests_mock, transport):
    requests_mock.post(TEST_NODE, exc=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(TransportError):
        transport.request(Method.BLOCK_NUMBER, TEST_NODE, [])


def test_http_error_is_a_transport_error(requests_mock, transport):
    requests_mock.post(TEST_NODE, status_code=502, text="bad gateway")
    with pytest.raises(TransportError):
        transport.request(Method.BLOCK_NUMBER, TEST_NODE, [])


def test_invalid_json_is_a_transport_error(requests_mock, transport):
    requests_mock.post(TEST_NODE, text="<html>not json</html>")
    with pytest.raises(TransportError):
        transport.request(Method.BLOCK_NUMBER, TEST_NODE, [])


def test_client_returns_result_over_http(requests_mock, transport):
    requests_mock.post(TEST_NODE, json={"jsonrpc": "2.0", "id": 1, "result": ["a", "b"]})
    client = RPCClient(TEST_NODE, transport)
    assert client.call(Method.GET_ALL_VALIDATOR_ADDRESSES) == ["a", "b"]


def test_client_raises_node_errors(requests_mock, transport):
    requests_mock.post(TEST_NODE, json={"jsonrpc": "2.0", "id": 1,
                                        "error": {"code": -32602, "message": "invalid argument 0"}})
    client = RPCClient(TEST_NODE, transport)

    with pytest.raises(RPCError) as excinfo:
        client.call(Method.GET_BALANCE, ["bad", "latest"])

    assert excinfo.value.code == -32602
    assert excinfo.value.method == Method.GET_BALANCE
    assert "invalid argument 0" in str(excinfo.value)


def test_client_rejects_reply_without_result():
    client = RPCClient(TEST_NODE, FakeTransport({Method.BLOCK_NUMBER: {"jsonrpc": "2.0", "id": 1}}))
    with pytest.raises(TransportError):
        client.call(Method.BLOCK_NUMBER)


def test_client_string_error_member():
    client = RPCClient(TEST_NODE, FakeTransport({Method.BLOCK_NUMBER: {"jsonrpc": "2.0", "error": "boom"}}))
    with pytest.raises(RPCError, match="boom"):
        client.call(Method.BLOCK_NUMBER)


def test_client_forwards_params():
    fake = FakeTransport({Method.GET_BALANCE: "0x0"})
    RPCClient(TEST_NODE, fake).call(Method.GET_BALANCE, ("one1abc", "latest"))
    assert fake.calls == [(Method.GET_BALANCE, TEST_NODE, ["one1abc", "latest"])]
