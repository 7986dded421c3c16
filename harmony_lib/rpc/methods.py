"""
JSON-RPC method names understood by Harmony nodes.
"""


class Method:
    """RPC method name constants."""
    GET_BALANCE = "hmy_getBalance"
    GET_LATEST_BLOCK_HEADER = "hmy_latestHeader"
    GET_BLOCK_BY_NUMBER = "hmy_getBlockByNumber"
    BLOCK_NUMBER = "hmy_blockNumber"
    GET_BLOCK_TRANSACTION_COUNT_BY_NUMBER = "hmy_getBlockTransactionCountByNumber"
    GET_SHARDING_STRUCTURE = "hmy_getShardingStructure"
    GET_TRANSACTION_COUNT = "hmy_getTransactionCount"
    SEND_RAW_TRANSACTION = "hmy_sendRawTransaction"
    SEND_RAW_STAKING_TRANSACTION = "hmy_sendRawStakingTransaction"
    GET_TRANSACTION_RECEIPT = "hmy_getTransactionReceipt"
    GET_ALL_VALIDATOR_ADDRESSES = "hmy_getAllValidatorAddresses"
    GET_ELECTED_VALIDATOR_ADDRESSES = "hmy_getElectedValidatorAddresses"
    GET_VALIDATOR_INFORMATION = "hmy_getValidatorInformation"
    GET_ALL_VALIDATOR_INFORMATION = "hmy_getAllValidatorInformation"
    GET_ALL_VALIDATOR_INFORMATION_BY_BLOCK_NUMBER = "hmy_getAllValidatorInformationByBlockNumber"
    GET_DELEGATIONS_BY_VALIDATOR = "hmy_getDelegationsByValidator"
    GET_DELEGATIONS_BY_DELEGATOR = "hmy_getDelegationsByDelegator"
    GET_CURRENT_TRANSACTION_ERROR_SINK = "hmy_getCurrentTransactionErrorSink"
    GET_CURRENT_STAKING_ERROR_SINK = "hmy_getCurrentStakingErrorSink"
