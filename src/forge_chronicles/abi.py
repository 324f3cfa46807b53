"""Constructor ABI helpers for forge-chronicles library."""

from typing import Any, Dict, List, Optional

from .exceptions import ConstructorMismatchError


def find_constructor(abi: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the constructor item of an ABI, or None if the contract has none."""
    for item in abi:
        if item.get("type") == "constructor":
            return item
    return None


def split_tuple_value(value: str) -> List[str]:
    """
    Split a tuple argument as rendered by forge, e.g. "(1, 0xabc, true)".

    The split is positional on ", " so nested tuples or strings containing
    the separator are not handled.
    """
    text = value.strip()
    if text.startswith("(") and text.endswith(")"):
        text = text[1:-1]
    return text.split(", ")


def match_constructor_inputs(
    abi: List[Dict[str, Any]], arguments: Optional[List[Any]]
) -> Dict[str, Any]:
    """
    Map constructor parameter names to the values a contract was deployed with.

    Args:
        abi: Contract ABI
        arguments: Positional constructor arguments from the broadcast file

    Returns:
        Dictionary of parameter name -> value. Tuple parameters become a nested
        dictionary of component name -> value. Empty if the contract has no
        constructor or no arguments were recorded.

    Raises:
        ConstructorMismatchError: If the argument count differs from the
            constructor's input count
    """
    constructor = find_constructor(abi)
    if constructor is None or arguments is None:
        return {}

    inputs = constructor.get("inputs", [])
    if len(inputs) != len(arguments):
        raise ConstructorMismatchError(
            f"Couldn't match constructor inputs: expected {len(inputs)} "
            f"arguments, got {len(arguments)}"
        )

    mapping: Dict[str, Any] = {}
    for param, value in zip(inputs, arguments):
        if param.get("type") == "tuple":
            parts = split_tuple_value(str(value))
            mapping[param["name"]] = {
                component["name"]: part
                for component, part in zip(param.get("components", []), parts)
            }
        else:
            mapping[param["name"]] = value

    return mapping
