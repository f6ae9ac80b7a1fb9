"""
Canonical Payload
=================
Deterministic serialization of a request's parameters for hashing.

The byte form matches PHP's ``json_encode`` defaults so that signatures
computed by existing clients keep verifying:

- keys sorted in natural order (digit runs compare as numbers)
- no whitespace between tokens
- non-ASCII characters escaped as lowercase ``\\uXXXX``
- forward slashes escaped as ``\\/``
"""

import json
from functools import cmp_to_key
from typing import Any, Mapping, Tuple

_SPACES = " \t\n\v\f\r"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _compare_right(a: str, i: int, b: str, j: int) -> Tuple[int, int, int]:
    """Compare integer digit runs: the longer run wins, else the first difference."""
    bias = 0
    while True:
        more_a = i < len(a) and _is_digit(a[i])
        more_b = j < len(b) and _is_digit(b[j])
        if not more_a and not more_b:
            return bias, i, j
        if not more_a:
            return -1, i, j
        if not more_b:
            return 1, i, j
        if not bias and a[i] != b[j]:
            bias = -1 if a[i] < b[j] else 1
        i += 1
        j += 1


def _compare_left(a: str, i: int, b: str, j: int) -> Tuple[int, int, int]:
    """Compare digit runs with a leading zero left-aligned, like fractions."""
    while True:
        more_a = i < len(a) and _is_digit(a[i])
        more_b = j < len(b) and _is_digit(b[j])
        if not more_a and not more_b:
            return 0, i, j
        if not more_a:
            return -1, i, j
        if not more_b:
            return 1, i, j
        if a[i] != b[j]:
            return (-1 if a[i] < b[j] else 1), i, j
        i += 1
        j += 1


def natural_compare(a: str, b: str) -> int:
    """
    Compare two strings the way PHP's strnatcmp does.

    Characters are compared one by one; only where both strings sit on a
    digit are the digit runs compared as numbers. Whitespace is skipped and
    leading zeros at the start of a string are ignored. Case-sensitive.
    """
    i = j = 0
    len_a, len_b = len(a), len(b)
    while i + 1 < len_a and a[i] == "0" and _is_digit(a[i + 1]):
        i += 1
    while j + 1 < len_b and b[j] == "0" and _is_digit(b[j + 1]):
        j += 1

    while True:
        while i < len_a and a[i] in _SPACES:
            i += 1
        while j < len_b and b[j] in _SPACES:
            j += 1
        if i >= len_a or j >= len_b:
            break

        ca, cb = a[i], b[j]
        if _is_digit(ca) and _is_digit(cb):
            if ca == "0" or cb == "0":
                result, i, j = _compare_left(a, i, b, j)
            else:
                result, i, j = _compare_right(a, i, b, j)
            if result:
                return result
            continue

        if ca != cb:
            return -1 if ca < cb else 1
        i += 1
        j += 1

    if i >= len_a and j >= len_b:
        return 0
    return -1 if i >= len_a else 1


def _compare_keys(a: str, b: str) -> int:
    # Keys equal under natural ordering ("a 1" / "a1") fall back to raw order
    return natural_compare(a, b) or (a > b) - (a < b)


_NaturalKey = cmp_to_key(_compare_keys)


def natural_sort_key(key: Any):
    """Sort key implementing natural ordering ("item2" before "item10")."""
    return _NaturalKey(str(key))


def encode_json(value: Any) -> str:
    """Encode a value the way PHP json_encode does with default flags."""
    encoded = json.dumps(value, ensure_ascii=True, separators=(",", ":"))
    return encoded.replace("/", "\\/")


def canonicalize(
    params: Mapping[str, Any],
    signature_field: str = "signature",
) -> bytes:
    """
    Build the canonical payload for a parameter mapping.
    
    Args:
        params: Full request parameter mapping (not modified)
        signature_field: Name of the field excluded from the payload
        
    Returns:
        Canonical payload bytes
    """
    remaining = {
        str(name): value
        for name, value in params.items()
        if str(name) != signature_field
    }
    ordered = {
        name: remaining[name]
        for name in sorted(remaining, key=natural_sort_key)
    }
    return encode_json(ordered).encode("ascii")
