"""
Contract ABI helpers: parse human-readable or JSON ABIs, encode calldata and
decode return data with eth_abi.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_signature_to_4byte_selector, is_address, to_checksum_address

from .amounts import parse_int
from .errors import ValidationError

_ARRAY_RE = re.compile(r"^(.*)\[(\d*)\]$")
_INT_RE = re.compile(r"^(u?int)(\d*)$")
_BYTES_RE = re.compile(r"^bytes(\d+)$")
_MODIFIERS = {"view", "pure", "payable", "nonpayable", "external", "public", "virtual", "override"}
_LOCATIONS = {"memory", "calldata", "storage", "indexed"}


@dataclass(frozen=True)
class AbiParam:
    """A function input or output. ``type`` is canonical (tuples as ``(a,b)``)."""

    type: str
    name: str = ""
    components: Tuple["AbiParam", ...] = ()


@dataclass(frozen=True)
class AbiFunction:
    name: str
    inputs: Tuple[AbiParam, ...] = ()
    outputs: Tuple[AbiParam, ...] = ()
    state_mutability: str = "nonpayable"

    @property
    def input_types(self) -> List[str]:
        return [param.type for param in self.inputs]

    @property
    def output_types(self) -> List[str]:
        return [param.type for param in self.outputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> str:
        return "0x" + function_signature_to_4byte_selector(self.signature).hex()

    def encode_call(self, args: Sequence[Any] = ()) -> str:
        """Return ``0x``-prefixed calldata for this function with ``args``."""

        if len(args) != len(self.inputs):
            raise ValidationError(
                f"{self.name} expects {len(self.inputs)} argument(s), got {len(args)}",
                fields=["args"],
            )
        values = [coerce_value(param, value) for param, value in zip(self.inputs, args)]
        try:
            encoded = abi_encode(self.input_types, values) if self.inputs else b""
        except (EncodingError, TypeError, ValueError, OverflowError) as exc:
            raise ValidationError(f"Failed to encode arguments for {self.signature}: {exc}") from exc
        return self.selector + encoded.hex()

    def decode_output(self, data: Union[str, bytes]) -> Tuple[Any, ...]:
        if not self.outputs:
            return ()
        raw = _to_bytes(data)
        try:
            return tuple(abi_decode(self.output_types, raw))
        except (DecodingError, TypeError, ValueError) as exc:
            raise ValidationError(f"Failed to decode {self.name} result: {exc}") from exc


def _to_bytes(data: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    text = (data or "").strip()
    if text.startswith(("0x", "0X")):
        text = text[2:]
    if len(text) % 2:
        text = "0" + text
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise ValidationError(f"Invalid hex data: {data!r}") from None


def _split_top_level(text: str) -> List[str]:
    """Split on commas that are not nested inside parentheses."""

    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise ValidationError(f"Unbalanced parentheses in '{text}'")
        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    if depth != 0:
        raise ValidationError(f"Unbalanced parentheses in '{text}'")
    tail = "".join(current).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def _matching_paren(text: str, start: int) -> int:
    depth = 0
    for index in range(start, len(text)):
        if text[index] == "(":
            depth += 1
        elif text[index] == ")":
            depth -= 1
            if depth == 0:
                return index
    raise ValidationError(f"Unbalanced parentheses in '{text}'")


def _canonical_elementary(type_str: str) -> str:
    match = _ARRAY_RE.match(type_str)
    if match:
        return f"{_canonical_elementary(match.group(1))}[{match.group(2)}]"
    int_match = _INT_RE.match(type_str)
    if int_match and not int_match.group(2):
        return f"{int_match.group(1)}256"
    if type_str == "byte":
        return "bytes1"
    return type_str


def _parse_param(text: str) -> AbiParam:
    source = text.strip()
    if not source:
        raise ValidationError("Empty parameter in ABI signature")
    if source.startswith("tuple("):
        source = source[len("tuple"):]

    if source.startswith("("):
        end = _matching_paren(source, 0)
        components = tuple(_parse_param(part) for part in _split_top_level(source[1:end]))
        rest = source[end + 1:].split()
        suffix = ""
        if rest and rest[0].startswith("["):
            suffix = rest.pop(0)
        names = [token for token in rest if token not in _LOCATIONS]
        base = "(" + ",".join(component.type for component in components) + ")"
        return AbiParam(type=base + suffix, name=names[-1] if names else "", components=components)

    tokens = source.split()
    names = [token for token in tokens[1:] if token not in _LOCATIONS]
    return AbiParam(type=_canonical_elementary(tokens[0]), name=names[-1] if names else "")


def _parse_param_list(text: str) -> Tuple[AbiParam, ...]:
    return tuple(_parse_param(part) for part in _split_top_level(text) if part)


def parse_signature(signature: str) -> Optional[AbiFunction]:
    """Parse a human-readable function signature.

    Accepts ``function transfer(address to, uint256 amount) returns (bool)`` and
    the bare ``transfer(address,uint256)`` form. Returns ``None`` for events,
    errors and constructors.
    """

    text = " ".join(signature.strip().split())
    keyword = text.split(" ", 1)[0]
    if keyword in {"event", "error", "constructor", "fallback", "receive"}:
        return None
    if keyword == "function":
        text = text[len("function"):].strip()

    open_index = text.find("(")
    if open_index <= 0:
        raise ValidationError(f"Invalid function signature: '{signature}'")
    name = text[:open_index].strip()
    close_index = _matching_paren(text, open_index)
    inputs = _parse_param_list(text[open_index + 1:close_index])

    rest = text[close_index + 1:].strip()
    outputs: Tuple[AbiParam, ...] = ()
    mutability = "nonpayable"
    returns_at = rest.find("returns")
    if returns_at >= 0:
        ret_open = rest.find("(", returns_at)
        if ret_open < 0:
            raise ValidationError(f"Invalid returns clause in '{signature}'")
        ret_close = _matching_paren(rest, ret_open)
        outputs = _parse_param_list(rest[ret_open + 1:ret_close])
        rest = rest[:returns_at]
    for token in rest.split():
        if token in {"view", "pure", "payable"}:
            mutability = token
        elif token not in _MODIFIERS:
            raise ValidationError(f"Unexpected token '{token}' in '{signature}'")
    return AbiFunction(name=name, inputs=inputs, outputs=outputs, state_mutability=mutability)


def _param_from_json(entry: Dict[str, Any]) -> AbiParam:
    type_str = str(entry.get("type", ""))
    name = str(entry.get("name") or "")
    if type_str.startswith("tuple"):
        components = tuple(_param_from_json(item) for item in entry.get("components") or [])
        suffix = type_str[len("tuple"):]
        base = "(" + ",".join(component.type for component in components) + ")"
        return AbiParam(type=base + suffix, name=name, components=components)
    return AbiParam(type=_canonical_elementary(type_str), name=name)


def _function_from_json(entry: Dict[str, Any]) -> Optional[AbiFunction]:
    if entry.get("type", "function") != "function":
        return None
    if not entry.get("name"):
        raise ValidationError("ABI function entry is missing a name")
    mutability = entry.get("stateMutability")
    if not mutability:
        mutability = "view" if entry.get("constant") else "nonpayable"
    return AbiFunction(
        name=str(entry["name"]),
        inputs=tuple(_param_from_json(item) for item in entry.get("inputs") or []),
        outputs=tuple(_param_from_json(item) for item in entry.get("outputs") or []),
        state_mutability=mutability,
    )


def parse_abi(abi: Union[str, Iterable[Any]]) -> List[AbiFunction]:
    """Parse an ABI given as a JSON string, human-readable signatures or JSON entries."""

    entries: Any = abi
    if isinstance(abi, str):
        text = abi.strip()
        if not text:
            raise ValidationError("ABI is empty", fields=["abiString"])
        if text.startswith(("[", "{")):
            try:
                entries = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ValidationError(f"Invalid ABI JSON: {exc.msg}", fields=["abiString"]) from exc
        else:
            entries = [line for line in re.split(r"[\n;]", text) if line.strip()]
    if isinstance(entries, dict):
        entries = entries.get("abi", [entries])

    functions: List[AbiFunction] = []
    for entry in entries:
        if isinstance(entry, AbiFunction):
            parsed: Optional[AbiFunction] = entry
        elif isinstance(entry, str):
            parsed = parse_signature(entry)
        elif isinstance(entry, dict):
            parsed = _function_from_json(entry)
        else:
            raise ValidationError(f"Unsupported ABI entry: {entry!r}", fields=["abiString"])
        if parsed is not None:
            functions.append(parsed)
    return functions


def find_function(
    functions: Sequence[AbiFunction],
    name: str,
    arg_count: Optional[int] = None,
) -> AbiFunction:
    """Look up ``name``; overloads are disambiguated by argument count."""

    candidates = [fn for fn in functions if fn.name == name]
    if not candidates:
        raise ValidationError(f"Function '{name}' not found in ABI", fields=["functionName"])
    if arg_count is not None:
        for fn in candidates:
            if len(fn.inputs) == arg_count:
                return fn
    return candidates[0]


def parse_args_string(args_string: Optional[str]) -> List[Any]:
    """Decode the JSON argument list tools receive as a string."""

    if args_string is None:
        return []
    if not isinstance(args_string, str):
        return list(args_string) if isinstance(args_string, (list, tuple)) else [args_string]
    text = args_string.strip()
    if not text:
        return []
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"argsString must be a JSON array: {exc.msg}", fields=["argsString"]) from exc
    return value if isinstance(value, list) else [value]


def coerce_value(param: AbiParam, value: Any) -> Any:
    """Convert a loosely-typed JSON value into what eth_abi expects for ``param``."""

    type_str = param.type
    array_match = _ARRAY_RE.match(type_str)
    if array_match:
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                raise ValidationError(f"Expected an array for {type_str}, got {value!r}") from None
        if not isinstance(value, (list, tuple)):
            raise ValidationError(f"Expected an array for {type_str}, got {value!r}")
        size = array_match.group(2)
        if size and len(value) != int(size):
            raise ValidationError(f"Expected {size} items for {type_str}, got {len(value)}")
        element = AbiParam(type=array_match.group(1), components=param.components)
        return [coerce_value(element, item) for item in value]

    if type_str.startswith("("):
        if isinstance(value, dict):
            missing = [c.name for c in param.components if c.name not in value]
            if missing:
                raise ValidationError(f"Tuple value is missing fields: {', '.join(missing)}")
            value = [value[c.name] for c in param.components]
        if not isinstance(value, (list, tuple)) or len(value) != len(param.components):
            raise ValidationError(f"Expected {len(param.components)} values for {type_str}")
        return tuple(coerce_value(c, item) for c, item in zip(param.components, value))

    if type_str == "address":
        if not isinstance(value, str) or not is_address(value):
            raise ValidationError(f"Invalid address: {value!r}")
        return to_checksum_address(value)

    if type_str == "bool":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        if value in (0, 1):
            return bool(value)
        raise ValidationError(f"Invalid bool: {value!r}")

    int_match = _INT_RE.match(type_str)
    if int_match:
        number = parse_int(value, field=param.name or type_str)
        bits = int(int_match.group(2) or 256)
        if int_match.group(1) == "uint":
            low, high = 0, 2 ** bits - 1
        else:
            low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
        if not low <= number <= high:
            raise ValidationError(f"Value {number} out of range for {type_str}")
        return number

    if type_str == "string":
        return value if isinstance(value, str) else json.dumps(value)

    if type_str == "bytes" or _BYTES_RE.match(type_str):
        raw = _to_bytes(value) if isinstance(value, (str, bytes, bytearray)) else bytes(value)
        size_match = _BYTES_RE.match(type_str)
        if size_match and len(raw) > int(size_match.group(1)):
            raise ValidationError(f"Value too long for {type_str}: {len(raw)} bytes")
        return raw

    raise ValidationError(f"Unsupported ABI type: {type_str}")


def encode_function_data(abi: Union[str, Iterable[Any]], function_name: str, args: Sequence[Any] = ()) -> str:
    """Encode calldata for ``function_name`` in ``abi`` without touching the network."""

    fn = find_function(parse_abi(abi), function_name, len(args))
    return fn.encode_call(args)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    return value


def stringify_result(values: Sequence[Any]) -> str:
    """Render decoded return values: primitives as text, anything else as JSON."""

    value: Any = values[0] if len(values) == 1 else list(values)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (int, str)):
        return str(value)
    return json.dumps(_jsonable(value))


ERC20_ABI = parse_abi([
    "function name() view returns (string)",
    "function symbol() view returns (string)",
    "function decimals() view returns (uint8)",
    "function totalSupply() view returns (uint256)",
    "function balanceOf(address owner) view returns (uint256)",
    "function allowance(address owner, address spender) view returns (uint256)",
    "function approve(address spender, uint256 amount) returns (bool)",
    "function transfer(address to, uint256 amount) returns (bool)",
])

ERC721_ABI = parse_abi([
    "function mint(address to, uint256 tokenId)",
    "function transferFrom(address from, address to, uint256 tokenId)",
])


def erc20(name: str) -> AbiFunction:
    return find_function(ERC20_ABI, name)


def erc721(name: str) -> AbiFunction:
    return find_function(ERC721_ABI, name)


__all__ = [
    "AbiParam",
    "AbiFunction",
    "parse_signature",
    "parse_abi",
    "find_function",
    "parse_args_string",
    "coerce_value",
    "encode_function_data",
    "stringify_result",
    "ERC20_ABI",
    "ERC721_ABI",
    "erc20",
    "erc721",
]
