"""ABI call encoding and result decoding for arb-deployments library."""

from typing import Any, Dict, List, Sequence

from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

from .exceptions import ArtifactError


def canonical_type(param: Dict[str, Any]) -> str:
    """
    Convert an ABI parameter into its canonical type string.

    Tuples are expanded from their components, keeping any array suffix:
    a ``tuple[]`` with components (address, uint8) becomes ``(address,uint8)[]``.

    Args:
        param: ABI input or output entry

    Returns:
        Canonical type string usable in signatures and by eth-abi
    """
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def find_function(abi: List[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """
    Find a function entry by name.

    Raises:
        ArtifactError: If the ABI has no function with that name
    """
    for item in abi:
        if item.get("type") == "function" and item.get("name") == name:
            return item

    raise ArtifactError(f"Function '{name}' not found in contract ABI")


def function_signature(entry: Dict[str, Any]) -> str:
    types = ",".join(canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def encode_call(abi: List[Dict[str, Any]], name: str, args: Sequence[Any] = ()) -> str:
    """
    Build ``eth_call`` data for a function call.

    Args:
        abi: Contract ABI
        name: Function name
        args: Positional arguments matching the function inputs

    Returns:
        Hex string: 4-byte selector followed by the encoded arguments
    """
    entry = find_function(abi, name)
    inputs = entry.get("inputs", [])
    if len(inputs) != len(args):
        raise ArtifactError(
            f"{name} expects {len(inputs)} argument(s), got {len(args)}"
        )

    selector = function_signature_to_4byte_selector(function_signature(entry))
    encoded_args = encode([canonical_type(p) for p in inputs], list(args))
    return encode_hex(selector + encoded_args)


def decode_result(abi: List[Dict[str, Any]], name: str, data: str) -> Any:
    """
    Decode the return data of a function call.

    Args:
        abi: Contract ABI
        name: Function name
        data: Hex return data from ``eth_call``

    Returns:
        The single output value when the function has one output,
        otherwise a tuple of outputs
    """
    entry = find_function(abi, name)
    output_types = [canonical_type(p) for p in entry.get("outputs", [])]
    values = decode(output_types, decode_hex(data))

    if len(values) == 1:
        return values[0]
    return values
