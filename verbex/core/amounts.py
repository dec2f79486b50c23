"""Fixed-point amount conversion and hex helpers.

All conversions are integer/Decimal based; floats never touch raw on-chain values.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, List, Union

from .errors import ValidationError

MAX_DECIMALS = 255

_DECIMAL_RE = re.compile(r'^(-)?(\d*)(?:\.(\d*))?$')
_HEX_RE = re.compile(r'^0x[0-9a-fA-F]*$')

HEX_TARGETS = ('string', 'number', 'bigint', 'boolean', 'bytes')


def _check_decimals(decimals: Any) -> int:
    if isinstance(decimals, bool):
        raise ValidationError('decimals must be an integer', fields=['decimals'])
    try:
        value = int(decimals)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid decimals: {decimals!r}', fields=['decimals']) from None
    if value < 0 or value > MAX_DECIMALS:
        raise ValidationError(f'decimals must be between 0 and {MAX_DECIMALS}', fields=['decimals'])
    return value


def parse_units(value: Union[str, int, Decimal], decimals: int) -> int:
    """Convert a human decimal string into an integer of smallest units.

    Digits beyond ``decimals`` are truncated.
    """

    places = _check_decimals(decimals)
    text = str(value).strip().replace('_', '')
    match = _DECIMAL_RE.match(text)
    if not match or not (match.group(2) or match.group(3)):
        raise ValidationError(f'Invalid decimal format: {value!r}', fields=['amount'])
    negative, whole, fraction = match.group(1), match.group(2) or '0', match.group(3) or ''
    fraction = fraction[:places].ljust(places, '0')
    units = int(whole) * 10 ** places + (int(fraction) if fraction else 0)
    return -units if negative else units


def parse_amount(value: Union[str, int, Decimal], decimals: int) -> int:
    """:func:`parse_units` for transfer amounts, which must be positive."""

    units = parse_units(value, decimals)
    if units <= 0:
        raise ValidationError(f'Amount must be greater than zero (got {value!r})', fields=['amount'])
    return units


def format_units(value: int, decimals: int) -> str:
    """Render smallest units as a canonical decimal string (no trailing zeros)."""

    places = _check_decimals(decimals)
    sign = '-' if value < 0 else ''
    whole, fraction = divmod(abs(int(value)), 10 ** places)
    if not places or not fraction:
        return f'{sign}{whole}'
    digits = str(fraction).rjust(places, '0').rstrip('0')
    return f'{sign}{whole}.{digits}'


def format_fixed(value: int, decimals: int, places: int = 6) -> str:
    """Render smallest units with a fixed number of decimal places, rounded down."""

    scaled = Decimal(int(value)).scaleb(-_check_decimals(decimals))
    return format(scaled.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN), 'f')


def normalize_decimal(value: str) -> str:
    """Canonical form of a decimal string: no sign on zero, no redundant zeros."""

    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f'Invalid decimal format: {value!r}') from None
    if number == 0:
        return '0'
    text = format(number.normalize(), 'f')
    return text.rstrip('0').rstrip('.') if '.' in text else text


def parse_int(value: Any, field: str = 'value') -> int:
    """Parse an integer given as int, decimal string or 0x-prefixed hex string."""

    if isinstance(value, bool) or value is None:
        raise ValidationError(f'Cannot convert {value!r} to an integer', fields=[field])
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        number = Decimal(str(value))
        if number != number.to_integral_value():
            raise ValidationError(f'Cannot convert {value!r} to an integer', fields=[field])
        return int(number)
    text = str(value).strip().replace('_', '')
    try:
        if text.lower().startswith(('0x', '-0x')):
            return int(text, 16)
        return int(text, 10)
    except ValueError:
        raise ValidationError(f'Cannot convert {value!r} to an integer', fields=[field]) from None


def to_hex(value: Any) -> str:
    """Hex-encode a bool, non-negative integer, string (UTF-8) or bytes."""

    if isinstance(value, bool):
        return '0x1' if value else '0x0'
    if isinstance(value, int):
        if value < 0:
            raise ValidationError('Negative integers have no unsigned hex form', fields=['value'])
        return hex(value)
    if isinstance(value, str):
        return '0x' + value.encode('utf-8').hex()
    if isinstance(value, (bytes, bytearray)):
        return '0x' + bytes(value).hex()
    raise ValidationError(f'Unable to convert {type(value).__name__} to hex', fields=['value'])


def from_hex(hex_value: str, to: str = 'string') -> Union[int, str, bool, List[int]]:
    """Decode a 0x-prefixed hex string into the requested type."""

    text = (hex_value or '').strip()
    if not _HEX_RE.match(text):
        raise ValidationError(f'Invalid hex value: {hex_value!r}', fields=['hex'])
    target = (to or 'string').strip().lower()
    digits = text[2:]

    if target in ('number', 'bigint'):
        return int(digits, 16) if digits else 0
    if target == 'boolean':
        number = int(digits, 16) if digits else 0
        if number not in (0, 1):
            raise ValidationError(f'Hex value {text} is not a boolean', fields=['hex'])
        return bool(number)

    if len(digits) % 2:
        digits = '0' + digits
    raw = bytes.fromhex(digits)
    if target == 'bytes':
        return list(raw)
    if target == 'string':
        try:
            return raw.rstrip(b'\x00').decode('utf-8')
        except UnicodeDecodeError:
            raise ValidationError(f'Hex value {text} is not valid UTF-8', fields=['hex']) from None
    raise ValidationError(
        f"Unsupported target type '{to}' (expected one of: {', '.join(HEX_TARGETS)})",
        fields=['to'],
    )


__all__ = [
    'MAX_DECIMALS',
    'HEX_TARGETS',
    'parse_units',
    'parse_amount',
    'format_units',
    'format_fixed',
    'normalize_decimal',
    'parse_int',
    'to_hex',
    'from_hex',
]
