"""
Pytest fixtures for the harmony-lib tests.
"""
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
from eth_account import Account as EthAccount

from harmony_lib import _rate_limited_log
from harmony_lib.accounts import Account, KeyStore
from harmony_lib.accounts.key_store import LIGHT_SCRYPT_N
from harmony_lib.address import to_bech32
from harmony_lib.config import ChainID, NetworkConfig
from harmony_lib.network import Network
from harmony_lib.rpc.methods import Method

# Constants for testing
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_PASSPHRASE = "harmony-test"
VALIDATOR_HEX = "0x0b585f8daefbc68a311fbd4cb20d9174ad174016"
VALIDATOR_ADDRESS = to_bech32(VALIDATOR_HEX)
RECIPIENT_HEX = "0x1234567890123456789012345678901234567890"
TEST_NODE = "https://api.s0.b.hmny.io"
TEST_CHAIN = ChainID(name="testnet", value=2, eth_value=1666700000)


# Make time.sleep instantaneous so polling loops don't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _reset_rate_limited_log():
    _rate_limited_log.reset()
    yield
    _rate_limited_log.reset()


@pytest.fixture(autouse=True)
def _no_node_override(monkeypatch):
    monkeypatch.delenv("HARMONY_NODE", raising=False)


class FakeTransport:
    """
    In-memory transport answering calls from per-method handlers.

    A handler is a plain value (the ``result``), an exception to raise, or a
    callable ``(endpoint, params)`` returning either. A dict with a
    ``jsonrpc`` key is returned as the whole reply envelope.
    """

    def __init__(self, handlers: Optional[Dict[str, Any]] = None):
        self.handlers: Dict[str, Any] = dict(handlers or {})
        self.calls: List[Tuple[str, str, List[Any]]] = []

    def on(self, method: str, handler: Any) -> "FakeTransport":
        self.handlers[method] = handler
        return self

    def request(self, method: str, endpoint: str, params: List[Any]) -> Dict[str, Any]:
        self.calls.append((method, endpoint, list(params)))
        if method not in self.handlers:
            return {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": f"the method {method} does not exist"}}

        value = self.handlers[method]
        if callable(value) and not isinstance(value, Exception):
            value = value(endpoint, params)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, dict) and "jsonrpc" in value:
            return value
        return {"jsonrpc": "2.0", "id": 1, "result": value}

    def methods(self) -> List[str]:
        return [method for method, _, _ in self.calls]

    def count(self, method: str) -> int:
        return self.methods().count(method)


def sequence(*values: Any) -> Callable[[str, List[Any]], Any]:
    """Handler returning the given values in turn, repeating the last one."""
    remaining = list(values)

    def _next(_endpoint, _params):
        if len(remaining) > 1:
            return remaining.pop(0)
        return remaining[0]

    return _next


def sharding_routes(count: int = 2, domain: str = "b.hmny.io") -> List[Dict[str, Any]]:
    return [
        {"shardID": i, "http": f"https://api.s{i}.{domain}", "ws": f"wss://ws.s{i}.{domain}", "current": i == 0}
        for i in range(count)
    ]


@pytest.fixture
def fake_transport():
    return FakeTransport({Method.GET_SHARDING_STRUCTURE: sharding_routes()})


@pytest.fixture
def network(fake_transport):
    """Testnet network routed through the fake transport"""
    return Network(name="testnet", transport=fake_transport)


@pytest.fixture
def test_identity():
    return EthAccount.from_key(TEST_PRIV_KEY)


@pytest.fixture
def unlocked_account(test_identity):
    """Account with its key already decrypted"""
    return Account(name="test", address=to_bech32(test_identity.address), identity=test_identity)


@pytest.fixture
def key_store(tmp_path):
    return KeyStore(str(tmp_path / "keystore"), scrypt_n=LIGHT_SCRYPT_N)


@pytest.fixture
def networks_table():
    return NetworkConfig.load_networks()
