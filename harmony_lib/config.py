"""
Network configuration for harmony-lib.

Known networks, their chain ids and node address patterns are bundled in
``networks.json`` and loaded once per process.
"""
import importlib.resources
import json
import logging
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from . import numeric
from .exceptions import InvalidAmountError

logger = logging.getLogger(__name__)

DEFAULT_KEY_STORE_PATH = os.path.expanduser("~/.harmony_lib/keystore")
KEY_STORE_PATH_ENV = "HARMONY_KEY_STORE_PATH"
NODE_ENV = "HARMONY_NODE"

DEFAULT_LOCAL_NODE = "http://localhost:9500"

# seconds to poll for a receipt after submission; 0 returns right away
DEFAULT_CONFIRMATION_TIMEOUT = 60


@dataclass(frozen=True)
class ChainID:
    """A named chain identity used when signing."""
    name: str
    value: int
    eth_value: int


@dataclass(frozen=True)
class Retry:
    """
    Retry policy for sharding structure resolution.

    Attributes:
        attempts: Total number of calls to make; 0 means a single call
        wait: Constant delay in seconds between attempts
    """
    attempts: int = 0
    wait: float = 0


@dataclass
class Gas:
    """
    Gas settings as configured by a caller.

    ``limit`` of -1 means the limit is inferred from the payload.
    ``price`` is expressed in Gwei.
    """
    limit: int = -1
    price: Decimal = Decimal(1)
    cost: Optional[Decimal] = None

    @classmethod
    def from_raw(cls, limit: int = 0, price: Optional[str] = None, cost: Optional[str] = None) -> "Gas":
        """
        Build gas settings from raw config values.

        Raises:
            InvalidAmountError: If price or cost aren't valid decimals
        """
        dec_cost = None
        if cost:
            try:
                dec_cost = numeric.new_dec(cost)
            except InvalidAmountError as exc:
                raise InvalidAmountError(f"Gas: Cost: {exc}") from exc

        dec_price = None
        if price:
            try:
                dec_price = numeric.new_dec(price)
            except InvalidAmountError as exc:
                raise InvalidAmountError(f"Gas: Price: {exc}") from exc

        if not limit:
            limit = -1

        if dec_price is None or dec_price.is_zero() or numeric.is_negative(dec_price):
            dec_price = Decimal(1)

        return cls(limit=limit, price=dec_price, cost=dec_cost)


class NetworkConfig:
    """Accessors for the bundled network table."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load the network table, caching it after the first read.

        Returns:
            Mapping of canonical network name to its settings
        """
        if cls._networks_cache is not None:
            return cls._networks_cache

        resource = importlib.resources.files("harmony_lib").joinpath("networks.json")
        with resource.open("r", encoding="utf-8") as f:
            cls._networks_cache = json.load(f)

        logger.debug("Loaded %d network definitions", len(cls._networks_cache))
        return cls._networks_cache

    @classmethod
    def normalize_name(cls, name: str) -> str:
        """
        Map a network name or alias to its canonical name.

        Returns:
            Canonical name, or an empty string for unknown names
        """
        lowered = (name or "").lower()
        for canonical, settings in cls.load_networks().items():
            if lowered == canonical or lowered in settings.get("aliases", []):
                return canonical
        return ""

    @classmethod
    def get_network(cls, name: str) -> Dict[str, Any]:
        """
        Get the settings of a network by name or alias.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        canonical = cls.normalize_name(name)
        if not canonical:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Network '{name}' not found. Available networks: {available}")
        return networks[canonical]

    @classmethod
    def chain_id(cls, name: str) -> ChainID:
        """
        Chain identity for a network; unknown names fall back to testnet.
        """
        canonical = cls.normalize_name(name)
        if not canonical:
            logger.debug("Unknown network %r, using the testnet chain id", name)
            canonical = "testnet"
        settings = cls.load_networks()[canonical]
        # dryrun signs for mainnet
        if canonical == "dryrun":
            canonical = "mainnet"
        return ChainID(name=canonical, value=settings["chainId"], eth_value=settings["ethChainId"])

    @classmethod
    def node_address(cls, name: str, shard_id: int) -> str:
        """
        Canonical node address for a network and shard.

        Unknown networks map to the local node pattern.
        """
        canonical = cls.normalize_name(name) or "localnet"
        pattern = cls.load_networks()[canonical]["node"]
        return pattern.format(shard=shard_id)


def default_node() -> Optional[str]:
    """Explicit node override from the environment, if any."""
    return os.environ.get(NODE_ENV) or None


def key_store_path() -> str:
    return os.environ.get(KEY_STORE_PATH_ENV, DEFAULT_KEY_STORE_PATH)
