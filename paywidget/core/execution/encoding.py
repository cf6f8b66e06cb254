"""
Calldata encoding helpers.

ERC-20 ``transfer`` / ``balanceOf`` encoding plus the memo convention:
memo bytes are appended after the ABI-encoded arguments. No token standard
backs this, so it lives in ``append_memo`` alone.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Optional, Union

from eth_utils import is_hex_address, keccak

from paywidget.core.errors import AmountError


# transfer(address,uint256)
ERC20_TRANSFER_SELECTOR = "0xa9059cbb"
# balanceOf(address)
ERC20_BALANCE_OF_SELECTOR = "0x70a08231"

MAX_UINT256 = 2**256 - 1


def strip_0x(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    if value < 0 or value > MAX_UINT256:
        raise ValueError("Value out of uint256 range")
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    if not is_hex_address(address):
        raise ValueError(f"Invalid address: {address}")
    return strip_0x(address).lower().zfill(64)


def selector_from_signature(signature: str) -> str:
    return "0x" + keccak(text=signature)[:4].hex()


def normalize_memo(memo: Optional[str]) -> str:
    """Memo as bare hex without prefix; empty when absent."""
    if not memo:
        return ""
    body = strip_0x(memo)
    if len(body) % 2 != 0:
        raise ValueError("Memo must be an even-length hex string")
    try:
        bytes.fromhex(body)
    except ValueError:
        raise ValueError(f"Memo is not valid hex: {memo}")
    return body


def memo_byte_length(memo: Optional[str]) -> int:
    return len(normalize_memo(memo)) // 2


def append_memo(calldata: str, memo: Optional[str]) -> str:
    """Append memo bytes to the tail of ``calldata``."""
    return calldata + normalize_memo(memo)


def encode_erc20_transfer(to_address: str, amount: int) -> str:
    # Encode: transfer(address to, uint256 amount)
    return (
        ERC20_TRANSFER_SELECTOR +
        _encode_address(to_address) +
        _encode_uint256(amount)
    )


def encode_erc20_balance_of(owner: str) -> str:
    return ERC20_BALANCE_OF_SELECTOR + _encode_address(owner)


def to_base_units(amount: Union[str, int, Decimal], decimals: int) -> int:
    """
    Convert a human amount to the asset's smallest unit.

    Raises AmountError for non-numeric input, negative amounts, or more
    fractional digits than ``decimals`` allows.
    """
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise AmountError(f"Invalid amount: {amount!r}")

    if not value.is_finite() or value < 0:
        raise AmountError(f"Invalid amount: {amount!r}")

    with localcontext() as ctx:
        ctx.prec = 100
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise AmountError(f"Amount {amount} exceeds {decimals} decimals")
        return int(scaled)


def from_base_units(value: int, decimals: int) -> str:
    """Format smallest units as a plain decimal string."""
    with localcontext() as ctx:
        ctx.prec = 100
        quantized = Decimal(value).scaleb(-decimals)
    text = format(quantized, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
