"""
Shared fakes for handler, orchestrator and dispatcher tests.

The fakes implement the ``ChainClient``, ``SmartAccountSession`` and quote
provider protocols in memory so no test touches the network.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pytest
from eth_utils import is_address

from verbex.core.abi import AbiFunction
from verbex.core.agent.context import ExecutionContext, ToolContext
from verbex.core.chains import CHAIN_METADATA
from verbex.core.errors import OnChainReadFailure, ValidationError
from verbex.core.execution.models import Call, SubmissionResult, TransactionReceipt, TransactionStatus
from verbex.core.swap.models import SwapQuote, SwapQuoteRequest
from verbex.core.tokens import TokenResolver


ACCOUNT = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
SPENDER = "0x3333333333333333333333333333333333333333"
ROUTER = "0x4444444444444444444444444444444444444444"
NFT_CONTRACT = "0x5555555555555555555555555555555555555555"
SIGNING_KEY = "0x" + "11" * 32

AVAX_USDC = "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E"
AVAX_WETH = "0x49D5c2BdFfac6CE2BFdB6640F4F80f226bc10bAB"


class FakeChainClient:
    """In-memory ``ChainClient``. Token state is keyed by lowercase address."""

    def __init__(self, chain, native_balance: int = 0):
        self.chain = chain
        self.native_balance = native_balance
        self.tokens: Dict[str, Dict[str, Any]] = {}
        self.failing: set = set()
        self.results: Dict[Tuple[str, str], Tuple[Any, ...]] = {}
        self.receipts: Dict[str, TransactionReceipt] = {}
        self.reads: List[Tuple[str, str, Tuple[Any, ...]]] = []

    def add_token(
        self,
        address: str,
        symbol: str,
        decimals: int,
        balance: int = 0,
        allowance: int = 0,
        name: Optional[str] = None,
        total_supply: int = 0,
    ) -> None:
        self.tokens[address.lower()] = {
            "name": name or symbol,
            "symbol": symbol,
            "decimals": decimals,
            "balance": balance,
            "allowance": allowance,
            "totalSupply": total_supply,
        }

    async def get_native_balance(self, address: str) -> int:
        return self.native_balance

    async def call(self, to: str, data: str) -> str:
        return "0x"

    async def read_contract(self, address: str, function: AbiFunction, args: Sequence[Any] = ()) -> Tuple[Any, ...]:
        if not is_address(address):
            raise ValidationError(f"Invalid contract address: {address}")
        key = address.lower()
        self.reads.append((key, function.name, tuple(args)))
        if key in self.failing:
            raise OnChainReadFailure(f"{function.name}() reverted")
        if (key, function.name) in self.results:
            return self.results[(key, function.name)]

        token = self.tokens.get(key)
        if token is None:
            raise OnChainReadFailure(f"{function.name}() returned no data at {address}")
        field = {"balanceOf": "balance"}.get(function.name, function.name)
        return (token[field],)

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        return self.receipts.get(tx_hash)

    async def get_fee_data(self) -> Tuple[int, int]:
        return 30_000_000_000, 1_500_000_000


class FakeHandle:
    def __init__(self, transaction_hash: Optional[str], status: TransactionStatus = TransactionStatus.CONFIRMED):
        self.transaction_hash = transaction_hash
        self.status = status

    async def wait_for_tx_hash(self, timeout: Optional[float] = None) -> Optional[str]:
        return self.transaction_hash

    async def wait(self, timeout: Optional[float] = None) -> SubmissionResult:
        return SubmissionResult(transaction_hash=self.transaction_hash, status=self.status)


class FakeSession:
    """Records every submission; ``statuses`` are handed out in order."""

    def __init__(self, chain, account_address: str = ACCOUNT, statuses: Optional[List[TransactionStatus]] = None):
        self.chain = chain
        self.account_address = account_address
        self.statuses = list(statuses or [])
        self.submissions: List[Union[Call, List[Call]]] = []

    async def send_transaction(self, calls: Union[Call, Sequence[Call]]) -> FakeHandle:
        self.submissions.append(calls if isinstance(calls, Call) else list(calls))
        status = self.statuses.pop(0) if self.statuses else TransactionStatus.CONFIRMED
        transaction_hash = "0x" + f"{len(self.submissions):064x}"
        return FakeHandle(transaction_hash, status)


class FakeQuoteProvider:
    def __init__(self, tx: Optional[Call] = None, spender: Optional[str] = None):
        self.tx = tx or Call(to=ROUTER, data="0xdeadbeef", value=0)
        self.spender = spender
        self.requests: List[SwapQuoteRequest] = []

    async def get_swap_quote(self, request: SwapQuoteRequest) -> SwapQuote:
        self.requests.append(request)
        return SwapQuote(
            token_in=request.token_in,
            token_out=request.token_out,
            amount_in=request.amount,
            tx=self.tx,
            spender=self.spender,
        )


@pytest.fixture
def chain():
    return CHAIN_METADATA[43114]


@pytest.fixture
def chain_client(chain):
    return FakeChainClient(chain)


@pytest.fixture
def session(chain):
    return FakeSession(chain)


@pytest.fixture
def quote_provider():
    return FakeQuoteProvider()


@pytest.fixture
def tool_context(chain, chain_client, session, quote_provider):
    return ToolContext(
        chain,
        ACCOUNT,
        chain_client=chain_client,
        token_resolver=TokenResolver(),
        session=session,
        quote_provider=quote_provider,
    )


@pytest.fixture
def execution_context():
    return ExecutionContext(signing_key=SIGNING_KEY, network="avalanche", smart_account_address=ACCOUNT)
