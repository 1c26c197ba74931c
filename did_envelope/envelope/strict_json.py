"""Strict JSON loading shared by the document and instruction parsers."""

import json
from typing import Any, Dict, List, Tuple, Union


def _reject_duplicates(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    obj: Dict[str, Any] = {}
    for name, value in pairs:
        if name in obj:
            raise ValueError(f"duplicate member {name!r}")
        obj[name] = value
    return obj


def as_bytes(raw: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """Normalize input to bytes; str is taken as UTF-8."""
    if isinstance(raw, str):
        return raw.encode("utf-8")
    return bytes(raw)


def load_object(raw: bytes) -> Dict[str, Any]:
    """Decode UTF-8 JSON whose top level is an object.

    Raises:
        ValueError: Not UTF-8, not JSON, not an object, a repeated member
            name in any object, or nesting too deep to decode.
    """
    try:
        data = json.loads(raw.decode("utf-8"), object_pairs_hook=_reject_duplicates)
    except RecursionError as e:
        raise ValueError("nesting too deep") from e
    if not isinstance(data, dict):
        raise ValueError(f"top level must be an object, got {type(data).__name__}")
    return data
