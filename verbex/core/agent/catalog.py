"""
The default tool catalog.

Descriptions are what the LLM reads when choosing a tool, so they say when to
use each one as well as what it does.
"""

from ..handlers import account, balances, contracts, nft, swap, tokens, transactions, transfers, units
from .arguments import (
    ApproveTokenArgs,
    BatchTransactionsArgs,
    EncodeFunctionDataArgs,
    FormatUnitsArgs,
    FromHexArgs,
    GetAddressArgs,
    GetBalanceArgs,
    GetTokenDetailsArgs,
    GetTransactionStatusArgs,
    MintNftArgs,
    ParseUnitsArgs,
    ReadContractArgs,
    SendTransactionArgs,
    SmartSwapArgs,
    SmartTransferArgs,
    ToHexArgs,
    TransferNftArgs,
)
from .tools import ToolRegistry, ToolRegistryBuilder


def build_default_registry() -> ToolRegistry:
    """Register every built-in tool and freeze the registry."""
    builder = ToolRegistryBuilder()

    # Account
    builder.register(
        "get_address",
        "Get the smart account address and the network it is on. "
        "Use this when the user asks for their wallet or account address.",
        GetAddressArgs,
        account.get_address,
        error_prefix="Error getting address",
    )
    builder.register(
        "get_balance",
        "Get the native balance and ERC-20 token balances of the smart account. "
        "Pass token symbols (USDC, WETH) or contract addresses; with neither, only the "
        "native balance is returned.",
        GetBalanceArgs,
        balances.get_balance,
        error_prefix="Error getting balance",
    )
    builder.register(
        "get_transaction_status",
        "Check whether a transaction is pending, confirmed or failed.",
        GetTransactionStatusArgs,
        account.get_transaction_status,
        error_prefix="Error checking transaction status",
    )

    # Tokens and contracts
    builder.register(
        "get_token_details",
        "Get an ERC-20 token's name, symbol, decimals and total supply.",
        GetTokenDetailsArgs,
        tokens.get_token_details,
        error_prefix="Error getting token details",
    )
    builder.register(
        "approve_token",
        "Approve a spender to move ERC-20 tokens from the smart account. "
        "Set approveMax for an unlimited approval.",
        ApproveTokenArgs,
        tokens.approve_token,
        error_prefix="Error approving token",
    )
    builder.register(
        "read_contract",
        "Call a read-only contract function and return its result. "
        "abiString is a JSON array of human-readable signatures.",
        ReadContractArgs,
        contracts.read_contract,
        error_prefix="Error in read_contract",
    )
    builder.register(
        "encode_function_data",
        "Encode calldata for a contract function without sending anything.",
        EncodeFunctionDataArgs,
        contracts.encode_function_data,
        requires_context=False,
        error_prefix="Error: Failed to encode function data",
    )

    # Transactions
    builder.register(
        "send_transaction",
        "Send a raw call from the smart account. value is in wei (decimal or 0x hex). "
        "Gas is sponsored.",
        SendTransactionArgs,
        transactions.send_transaction,
        error_prefix="Error: Failed to send transaction",
    )
    builder.register(
        "batch_transactions",
        "Send several calls atomically in a single user operation.",
        BatchTransactionsArgs,
        transactions.batch_transactions,
        error_prefix="Error: Failed to send batch transactions",
    )
    builder.register(
        "smart_transfer",
        "Transfer the native asset or an ERC-20 token to an address. "
        "Omit tokenAddress (or use \"eth\") for the native asset; amount is in human units.",
        SmartTransferArgs,
        transfers.smart_transfer,
        error_prefix="Error transferring the asset",
    )
    builder.register(
        "smart_swap",
        "Swap one token for another on the same chain using the DLN aggregator. "
        "Approves the router first when the allowance is short. "
        "Use this when the user wants to swap, trade, buy or sell tokens.",
        SmartSwapArgs,
        swap.smart_swap,
        error_prefix="Error creating swap order",
    )

    # NFTs
    builder.register(
        "mint_nft",
        "Mint an ERC-721 token by calling mint(address,uint256).",
        MintNftArgs,
        nft.mint_nft,
        error_prefix="Error minting NFT",
    )
    builder.register(
        "transfer_nft",
        "Transfer an ERC-721 token with transferFrom.",
        TransferNftArgs,
        nft.transfer_nft,
        error_prefix="Error transferring NFT",
    )

    # Utilities
    builder.register(
        "format_units",
        "Convert an integer amount in smallest units into a decimal string.",
        FormatUnitsArgs,
        units.format_units,
        requires_context=False,
        error_prefix="Error in format_units",
    )
    builder.register(
        "parse_units",
        "Convert a decimal amount into an integer of smallest units.",
        ParseUnitsArgs,
        units.parse_units,
        requires_context=False,
        error_prefix="Error in parse_units",
    )
    builder.register(
        "to_hex",
        "Hex-encode a number, string or boolean.",
        ToHexArgs,
        units.to_hex,
        requires_context=False,
        error_prefix="Error in to_hex",
    )
    builder.register(
        "from_hex",
        "Decode a hex value into a string, number, boolean or byte list.",
        FromHexArgs,
        units.from_hex,
        requires_context=False,
        error_prefix="Error in from_hex",
    )

    return builder.build()
