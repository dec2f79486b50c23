"""
Tests for contract reads, calldata encoding, raw sends, NFTs and account tools.
"""

import json

import pytest
from eth_abi import decode as abi_decode
from pydantic import ValidationError as PydanticValidationError

from verbex.core.agent.arguments import (
    BatchTransactionsArgs,
    EncodeFunctionDataArgs,
    GetAddressArgs,
    GetTransactionStatusArgs,
    MintNftArgs,
    ReadContractArgs,
    SendTransactionArgs,
    TransferNftArgs,
)
from verbex.core.errors import ValidationError
from verbex.core.execution.models import Call, TransactionReceipt
from verbex.core.handlers.account import get_address, get_transaction_status
from verbex.core.handlers.contracts import encode_function_data, read_contract
from verbex.core.handlers.nft import mint_nft, transfer_nft
from verbex.core.handlers.transactions import batch_transactions, send_transaction
from tests.conftest import ACCOUNT, AVAX_USDC, NFT_CONTRACT, RECIPIENT


BALANCE_OF_ABI = json.dumps(["function balanceOf(address owner) view returns (uint256)"])


class TestReadAndEncode:
    @pytest.mark.asyncio
    async def test_read_contract(self, tool_context, chain_client):
        chain_client.results[(AVAX_USDC.lower(), "balanceOf")] = (42,)

        output = await read_contract(
            ReadContractArgs(
                contractAddress=AVAX_USDC,
                abiString=BALANCE_OF_ABI,
                functionName="balanceOf",
                argsString=json.dumps([ACCOUNT]),
            ),
            tool_context,
        )

        assert output == "Result: 42"
        assert chain_client.reads == [(AVAX_USDC.lower(), "balanceOf", (ACCOUNT,))]

    @pytest.mark.asyncio
    async def test_read_contract_unknown_function(self, tool_context):
        with pytest.raises(ValidationError, match="Function 'ownerOf' not found in ABI"):
            await read_contract(
                ReadContractArgs(contractAddress=AVAX_USDC, abiString=BALANCE_OF_ABI, functionName="ownerOf"),
                tool_context,
            )

    @pytest.mark.asyncio
    async def test_encode_function_data_needs_no_context(self):
        output = await encode_function_data(
            EncodeFunctionDataArgs(
                abiString='["function approve(address spender, uint256 amount)"]',
                functionName="approve",
                argsString=json.dumps([RECIPIENT, "1000"]),
            ),
            None,
        )

        assert output.startswith("Encoded Data: 0x095ea7b3")
        spender, amount = abi_decode(["address", "uint256"], bytes.fromhex(output[len("Encoded Data: 0x") + 8:]))
        assert spender.lower() == RECIPIENT
        assert amount == 1000


class TestSend:
    @pytest.mark.asyncio
    async def test_send_transaction_accepts_hex_value(self, tool_context, session):
        output = await send_transaction(SendTransactionArgs(to=RECIPIENT, data="0xabcdef", value="0xde0b6b3a7640000"), tool_context)

        assert session.submissions == [Call(to=RECIPIENT, data="0xabcdef", value=10**18)]
        assert "Value: 1 AVAX" in output
        assert "Use 'get_transaction_status' to check confirmation." in output

    @pytest.mark.asyncio
    async def test_batch_is_one_submission(self, tool_context, session):
        output = await batch_transactions(
            BatchTransactionsArgs(transactions=[{"to": RECIPIENT, "value": "1"}, {"to": AVAX_USDC, "data": "0x1234"}]),
            tool_context,
        )

        assert session.submissions == [[Call(to=RECIPIENT, value=1), Call(to=AVAX_USDC, data="0x1234")]]
        assert "Number of transactions: 2" in output

    @pytest.mark.asyncio
    async def test_batch_validates_every_call_first(self, tool_context, session):
        with pytest.raises(ValidationError, match="data must be 0x-prefixed hex"):
            await batch_transactions(
                BatchTransactionsArgs(transactions=[{"to": RECIPIENT}, {"to": RECIPIENT, "data": "abcd"}]),
                tool_context,
            )
        assert session.submissions == []


class TestNft:
    @pytest.mark.asyncio
    async def test_mint_defaults(self, tool_context, session):
        output = await mint_nft(MintNftArgs(contractAddress=NFT_CONTRACT), tool_context)

        (call,) = session.submissions
        assert call.data.startswith("0x40c10f19")
        to, token_id = abi_decode(["address", "uint256"], bytes.fromhex(call.data[10:]))
        assert to.lower() == ACCOUNT
        assert token_id == 1
        assert "Token ID: 1" in output

    @pytest.mark.asyncio
    async def test_transfer_defaults_from_to_account(self, tool_context, session):
        output = await transfer_nft(TransferNftArgs(contractAddress=NFT_CONTRACT, to=RECIPIENT, tokenId="7"), tool_context)

        (call,) = session.submissions
        assert call.data.startswith("0x23b872dd")
        sender, to, token_id = abi_decode(["address", "address", "uint256"], bytes.fromhex(call.data[10:]))
        assert sender.lower() == ACCOUNT
        assert to.lower() == RECIPIENT
        assert token_id == 7
        assert output.startswith("NFT transferred successfully!")

    def test_transfer_requires_token_id(self):
        with pytest.raises(PydanticValidationError, match="tokenId"):
            TransferNftArgs(contractAddress=NFT_CONTRACT, to=RECIPIENT)


class TestAccount:
    @pytest.mark.asyncio
    async def test_get_address(self, tool_context):
        assert await get_address(GetAddressArgs(), tool_context) == f"Smart Account: {ACCOUNT}\nNetwork: avalanche"

    @pytest.mark.asyncio
    async def test_transaction_status(self, tool_context, chain_client):
        confirmed = "0x" + "aa" * 32
        failed = "0x" + "bb" * 32
        chain_client.receipts[confirmed] = TransactionReceipt(confirmed, True, block_number=12, gas_used=21000)
        chain_client.receipts[failed] = TransactionReceipt(failed, False)

        assert "Transaction confirmed!\nBlock Number: 12\nGas Used: 21000" in await get_transaction_status(
            GetTransactionStatusArgs(transactionHash=confirmed), tool_context
        )
        assert (await get_transaction_status(GetTransactionStatusArgs(transactionHash=failed), tool_context)).startswith(
            "Transaction failed!"
        )
        assert await get_transaction_status(
            GetTransactionStatusArgs(transactionHash="0x" + "cc" * 32), tool_context
        ) == "Transaction is still pending."

    @pytest.mark.asyncio
    async def test_transaction_status_rejects_bad_hash(self, tool_context):
        with pytest.raises(ValidationError, match="Invalid transaction hash"):
            await get_transaction_status(GetTransactionStatusArgs(transactionHash="0x1234"), tool_context)
