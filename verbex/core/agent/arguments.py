"""
Typed argument models for every tool.

Arguments arrive from the LLM as a loose JSON object; each tool validates them
into its model at the dispatch boundary. Field aliases are the camelCase names
the LLM sees; snake_case names are accepted as well.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError


class ToolArgs(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        frozen=True,
    )


class GetAddressArgs(ToolArgs):
    tool: Literal["get_address"] = "get_address"


class GetBalanceArgs(ToolArgs):
    tool: Literal["get_balance"] = "get_balance"
    token_symbols: Optional[List[str]] = Field(
        default=None,
        alias="tokenSymbols",
        description="Token symbols to check, e.g. [\"USDC\", \"WETH\"]",
    )
    token_addresses: Optional[List[str]] = Field(
        default=None,
        alias="tokenAddresses",
        description="ERC-20 contract addresses to check",
    )


class GetTokenDetailsArgs(ToolArgs):
    tool: Literal["get_token_details"] = "get_token_details"
    token_address: str = Field(alias="tokenAddress", description="ERC-20 contract address or symbol")


class ApproveTokenArgs(ToolArgs):
    tool: Literal["approve_token"] = "approve_token"
    token_address: str = Field(alias="tokenAddress", description="ERC-20 contract address or symbol")
    spender: str = Field(description="Address allowed to spend the tokens")
    amount: Optional[str] = Field(default=None, description="Amount in human units, e.g. \"10.5\"")
    approve_max: bool = Field(default=False, alias="approveMax", description="Approve the maximum uint256 amount")

    @model_validator(mode="after")
    def _amount_or_max(self) -> "ApproveTokenArgs":
        if not self.approve_max and not (self.amount or "").strip():
            raise ValueError("amount is required unless approveMax is true")
        return self


class ReadContractArgs(ToolArgs):
    tool: Literal["read_contract"] = "read_contract"
    contract_address: str = Field(alias="contractAddress", description="Contract to call")
    abi_string: str = Field(
        alias="abiString",
        description="JSON array of human-readable signatures, e.g. [\"function balanceOf(address) view returns (uint256)\"]",
    )
    function_name: str = Field(alias="functionName", description="Function to call")
    args_string: Optional[str] = Field(default=None, alias="argsString", description="JSON array of arguments")


class EncodeFunctionDataArgs(ToolArgs):
    tool: Literal["encode_function_data"] = "encode_function_data"
    abi_string: str = Field(alias="abiString", description="JSON array of human-readable signatures")
    function_name: str = Field(alias="functionName", description="Function to encode")
    args_string: Optional[str] = Field(default=None, alias="argsString", description="JSON array of arguments")


class SendTransactionArgs(ToolArgs):
    tool: Literal["send_transaction"] = "send_transaction"
    to: str = Field(description="Destination address")
    data: Optional[str] = Field(default=None, description="0x-prefixed calldata")
    value: Optional[str] = Field(default=None, description="Value in wei (decimal or 0x hex)")


class BatchCallArgs(ToolArgs):
    to: str = Field(description="Destination address")
    data: Optional[str] = Field(default=None, description="0x-prefixed calldata")
    value: Optional[str] = Field(default=None, description="Value in wei")


class BatchTransactionsArgs(ToolArgs):
    tool: Literal["batch_transactions"] = "batch_transactions"
    transactions: List[BatchCallArgs] = Field(
        min_length=1,
        description="Calls executed atomically in one user operation",
    )


class SmartTransferArgs(ToolArgs):
    tool: Literal["smart_transfer"] = "smart_transfer"
    amount: str = Field(description="Amount in human units")
    token_address: Optional[str] = Field(
        default=None,
        alias="tokenAddress",
        description="ERC-20 address or symbol; omit or use \"eth\" for the native asset",
    )
    destination: str = Field(description="Recipient address")


class GetTransactionStatusArgs(ToolArgs):
    tool: Literal["get_transaction_status"] = "get_transaction_status"
    transaction_hash: str = Field(alias="transactionHash", description="Transaction hash to look up")


class SmartSwapArgs(ToolArgs):
    tool: Literal["smart_swap"] = "smart_swap"
    token_in: Optional[str] = Field(default=None, alias="tokenIn", description="Input token address")
    token_out: Optional[str] = Field(default=None, alias="tokenOut", description="Output token address")
    token_in_symbol: Optional[str] = Field(default=None, alias="tokenInSymbol", description="Input token symbol")
    token_out_symbol: Optional[str] = Field(default=None, alias="tokenOutSymbol", description="Output token symbol")
    amount: str = Field(description="Input amount in human units")
    slippage: Optional[str] = Field(default=None, description="Slippage percent, or \"auto\"")
    wait: bool = Field(default=True, description="Wait for the swap to be confirmed")
    approve_max: bool = Field(default=False, alias="approveMax", description="Approve the maximum amount if needed")

    @model_validator(mode="after")
    def _tokens_present(self) -> "SmartSwapArgs":
        missing = []
        if not (self.token_in or self.token_in_symbol):
            missing.append("tokenIn or tokenInSymbol")
        if not (self.token_out or self.token_out_symbol):
            missing.append("tokenOut or tokenOutSymbol")
        if missing:
            raise ValueError(f"{' and '.join(missing)} is required")
        return self


class MintNftArgs(ToolArgs):
    tool: Literal["mint_nft"] = "mint_nft"
    contract_address: str = Field(alias="contractAddress", description="NFT contract address")
    to: Optional[str] = Field(default=None, description="Recipient; defaults to the smart account")
    token_id: Union[int, str] = Field(default=1, alias="tokenId", description="Token ID to mint")


class TransferNftArgs(ToolArgs):
    tool: Literal["transfer_nft"] = "transfer_nft"
    contract_address: str = Field(alias="contractAddress", description="NFT contract address")
    from_address: Optional[str] = Field(
        default=None,
        alias="from",
        description="Current owner; defaults to the smart account",
    )
    to: str = Field(description="Recipient address")
    token_id: Union[int, str] = Field(alias="tokenId", description="Token ID to transfer")


class FormatUnitsArgs(ToolArgs):
    tool: Literal["format_units"] = "format_units"
    value: str = Field(description="Integer amount in smallest units")
    decimals: int = Field(description="Token decimals")


class ParseUnitsArgs(ToolArgs):
    tool: Literal["parse_units"] = "parse_units"
    value: str = Field(description="Human-readable decimal amount")
    decimals: int = Field(description="Token decimals")


class ToHexArgs(ToolArgs):
    model_config = ConfigDict(coerce_numbers_to_str=False)

    tool: Literal["to_hex"] = "to_hex"
    value: Union[bool, int, str] = Field(description="Number, string or boolean to encode")


class FromHexArgs(ToolArgs):
    tool: Literal["from_hex"] = "from_hex"
    hex: str = Field(description="0x-prefixed hex value")
    to: Literal["string", "number", "bigint", "boolean", "bytes"] = Field(
        default="string",
        description="Target type",
    )


ToolArguments = Union[
    GetAddressArgs,
    GetBalanceArgs,
    GetTokenDetailsArgs,
    ApproveTokenArgs,
    ReadContractArgs,
    EncodeFunctionDataArgs,
    SendTransactionArgs,
    BatchTransactionsArgs,
    SmartTransferArgs,
    GetTransactionStatusArgs,
    SmartSwapArgs,
    MintNftArgs,
    TransferNftArgs,
    FormatUnitsArgs,
    ParseUnitsArgs,
    ToHexArgs,
    FromHexArgs,
]

ARGUMENT_MODELS: Dict[str, Type[ToolArgs]] = {
    model.model_fields["tool"].default: model for model in ToolArguments.__args__
}


def _describe_error(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "tool")
    if error.get("type") == "missing":
        return f"{location} is required"
    message = str(error.get("msg", "invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{location}: {message}" if location else message


def validate_arguments(model: Type[ToolArgs], raw: Optional[Dict[str, Any]]) -> ToolArgs:
    """Validate raw LLM arguments, raising our :class:`ValidationError` on failure."""
    payload = dict(raw or {})
    payload.pop("tool", None)
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        errors = exc.errors()
        fields = [str(error["loc"][0]) for error in errors if error.get("loc")]
        raise ValidationError("; ".join(_describe_error(error) for error in errors), fields=fields) from exc


__all__ = [
    "ToolArgs",
    "ToolArguments",
    "ARGUMENT_MODELS",
    "validate_arguments",
    "GetAddressArgs",
    "GetBalanceArgs",
    "GetTokenDetailsArgs",
    "ApproveTokenArgs",
    "ReadContractArgs",
    "EncodeFunctionDataArgs",
    "SendTransactionArgs",
    "BatchCallArgs",
    "BatchTransactionsArgs",
    "SmartTransferArgs",
    "GetTransactionStatusArgs",
    "SmartSwapArgs",
    "MintNftArgs",
    "TransferNftArgs",
    "FormatUnitsArgs",
    "ParseUnitsArgs",
    "ToHexArgs",
    "FromHexArgs",
]
