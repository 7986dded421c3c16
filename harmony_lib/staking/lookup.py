"""
Validator and delegation lookups.
"""
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from ..address import to_bech32
from ..exceptions import EmptyResultError, TransportError
from ..rpc.client import RPCClient
from ..rpc.methods import Method
from .types import DelegationInfo, ValidatorResult

logger = logging.getLogger(__name__)


def _address_list(result: Any, method: str) -> List[str]:
    if result is None:
        return []
    if not isinstance(result, list):
        raise TransportError(f"{method} returned {result!r}, expected a list")
    return [str(address) for address in result]


def _validate(model, value: Any, method: str):
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise TransportError(f"{method} returned a malformed reply: {e}") from e


def all_validators(client: RPCClient) -> List[str]:
    """Addresses of every registered validator"""
    return _address_list(client.call(Method.GET_ALL_VALIDATOR_ADDRESSES, []), Method.GET_ALL_VALIDATOR_ADDRESSES)


def elected_validators(client: RPCClient) -> List[str]:
    """Addresses of the validators elected for the current epoch"""
    return _address_list(
        client.call(Method.GET_ELECTED_VALIDATOR_ADDRESSES, []), Method.GET_ELECTED_VALIDATOR_ADDRESSES
    )


def validator_exists(client: RPCClient, validator_address: str) -> bool:
    return to_bech32(validator_address) in all_validators(client)


def elected_validator_exists(client: RPCClient, validator_address: str) -> bool:
    return to_bech32(validator_address) in elected_validators(client)


def validator_information(client: RPCClient, validator_address: str) -> ValidatorResult:
    """
    Information about one validator.

    Raises:
        RPCError: If the node doesn't know the validator
        EmptyResultError: If the node returned nothing
    """
    result = client.call(Method.GET_VALIDATOR_INFORMATION, [to_bech32(validator_address)])
    if not result:
        raise EmptyResultError(f"no information for validator {validator_address}")
    return _validate(ValidatorResult, result, Method.GET_VALIDATOR_INFORMATION)


def _information_page(client: RPCClient, page: int, block_number: Optional[int]) -> List[ValidatorResult]:
    if block_number is not None and block_number >= 0:
        method = Method.GET_ALL_VALIDATOR_INFORMATION_BY_BLOCK_NUMBER
        params = [page, hex(block_number)]
    else:
        method = Method.GET_ALL_VALIDATOR_INFORMATION
        params = [page]

    result = client.call(method, params)
    if result is None:
        return []
    if not isinstance(result, list):
        raise TransportError(f"{method} returned {result!r}, expected a list")
    return [_validate(ValidatorResult, entry, method) for entry in result]


def all_validator_information(
    client: RPCClient,
    fetch_all_pages: bool = False,
    block_number: Optional[int] = None
) -> List[ValidatorResult]:
    """
    Information about every validator.

    Args:
        client: Beacon shard client
        fetch_all_pages: Keep requesting pages until an empty one comes back;
            otherwise only the first page is returned
        block_number: Look the information up as of this block

    Returns:
        The validators, in page order
    """
    if not fetch_all_pages:
        return _information_page(client, 0, block_number)

    results: List[ValidatorResult] = []
    page = 0
    while True:
        entries = _information_page(client, page, block_number)
        if not entries:
            break
        results.extend(entries)
        page += 1

    logger.debug(f"Fetched {len(results)} validators over {page} pages")
    return results


def _delegations(client: RPCClient, method: str, address: str) -> List[DelegationInfo]:
    result = client.call(method, [to_bech32(address)])
    if result is None:
        return []
    if not isinstance(result, list):
        raise TransportError(f"{method} returned {result!r}, expected a list")
    return [_validate(DelegationInfo, entry, method) for entry in result]


def delegations_by_validator(client: RPCClient, validator_address: str) -> List[DelegationInfo]:
    return _delegations(client, Method.GET_DELEGATIONS_BY_VALIDATOR, validator_address)


def delegations_by_delegator(client: RPCClient, delegator_address: str) -> List[DelegationInfo]:
    return _delegations(client, Method.GET_DELEGATIONS_BY_DELEGATOR, delegator_address)
