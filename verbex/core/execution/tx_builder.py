"""
Builds the calls the smart account executes for each kind of operation.
"""

from typing import Any, Optional

from eth_utils import is_address, to_checksum_address

from ..abi import erc20, erc721
from ..amounts import parse_int
from ..errors import ValidationError
from .models import Call


# Maximum uint256 for unlimited approval
MAX_UINT256 = 2**256 - 1


def _require_address(value: Optional[str], field: str) -> str:
    if not value or not is_address(value):
        raise ValidationError(f"Invalid {field} address: {value!r}", fields=[field])
    return to_checksum_address(value)


def _require_hex_data(value: Optional[str], field: str = "data") -> str:
    data = (value or "0x").strip()
    if not data.startswith("0x"):
        raise ValidationError(f"{field} must be 0x-prefixed hex", fields=[field])
    try:
        bytes.fromhex(data[2:])
    except ValueError:
        raise ValidationError(f"{field} is not valid hex: {value!r}", fields=[field]) from None
    return data


class TransactionBuilder:
    """
    Builds calls for various protocols.

    Handles:
    - ERC20 approvals and transfers
    - Native transfers
    - ERC721 mint / transferFrom
    - Raw calls and aggregator swap transactions
    """

    @staticmethod
    def build_erc20_approve(token_address: str, spender_address: str, amount: int = MAX_UINT256) -> Call:
        """Build an ERC20 approval call."""
        if amount < 0 or amount > MAX_UINT256:
            raise ValidationError("Approval amount out of range", fields=["amount"])
        token = _require_address(token_address, "token")
        spender = _require_address(spender_address, "spender")
        return Call(to=token, data=erc20("approve").encode_call([spender, amount]))

    @staticmethod
    def build_erc20_transfer(token_address: str, to_address: str, amount: int) -> Call:
        """Build an ERC20 transfer call."""
        token = _require_address(token_address, "token")
        recipient = _require_address(to_address, "destination")
        return Call(to=token, data=erc20("transfer").encode_call([recipient, amount]))

    @staticmethod
    def build_native_transfer(to_address: str, amount_wei: int) -> Call:
        """Build a native token transfer."""
        if amount_wei < 0:
            raise ValidationError("Value must be non-negative", fields=["amount"])
        return Call(to=_require_address(to_address, "destination"), value=amount_wei)

    @staticmethod
    def build_nft_mint(contract_address: str, to_address: str, token_id: int) -> Call:
        contract = _require_address(contract_address, "contractAddress")
        recipient = _require_address(to_address, "to")
        return Call(to=contract, data=erc721("mint").encode_call([recipient, token_id]))

    @staticmethod
    def build_nft_transfer(contract_address: str, from_address: str, to_address: str, token_id: int) -> Call:
        contract = _require_address(contract_address, "contractAddress")
        sender = _require_address(from_address, "from")
        recipient = _require_address(to_address, "to")
        return Call(to=contract, data=erc721("transferFrom").encode_call([sender, recipient, token_id]))

    @staticmethod
    def build_raw(to_address: str, data: Optional[str] = None, value: Any = 0) -> Call:
        """Build a call from user-supplied fields; ``value`` is wei (decimal or hex)."""
        amount = parse_int(value if value not in (None, "") else 0, field="value")
        if amount < 0:
            raise ValidationError("Value must be non-negative", fields=["value"])
        return Call(to=_require_address(to_address, "to"), data=_require_hex_data(data), value=amount)
