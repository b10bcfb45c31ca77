"""
Vehicle field normalization.

- Coerce raw upstream values to trimmed strings ("" for missing), otherwise verbatim.
- Clean variant strings that repeat the year, make or fuel type.
- Derive a variant from a compound model string ("FIESTA ZETEC" under range "FIESTA").
"""

import re
from typing import Any

FUEL_TOKENS = {"DIESEL", "PETROL", "ELECTRIC", "HYBRID", "PHEV", "HEV", "MHEV", "GAS", "LPG"}

_LEADING_YEAR = re.compile(r"^\d{4}(?:\s+|$)")


def text(value: Any) -> str:
    """Upstream scalar -> trimmed string. None, bools and containers become ""."""
    if value is None or isinstance(value, (bool, dict, list)):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _collapse(value: Any) -> str:
    return " ".join(text(value).split())


def leading_year(value: Any) -> str:
    """First four characters of a date-ish value when they are digits ("2017-03-01" -> "2017")."""
    s = text(value)
    if len(s) >= 4 and s[:4].isdigit():
        return s[:4]
    return ""


def _strip_leading_words(s: str, words: str) -> str:
    """Drop `words` from the front of `s` when it matches whole tokens, case-insensitive."""
    prefix = words.split()
    tokens = s.split()
    if prefix and [t.upper() for t in tokens[: len(prefix)]] == [p.upper() for p in prefix]:
        return " ".join(tokens[len(prefix):])
    return s


def clean_variant(raw: Any, make: str = "") -> str:
    """
    Strip redundant tokens from a variant string.

    Removes a leading 4-digit year, a leading make name and leading/trailing
    fuel type tokens, repeating until nothing changes:
        "2017 FORD ZETEC DIESEL" (make "FORD") -> "ZETEC"
    """
    s = _collapse(raw)
    make = _collapse(make)
    while s:
        before = s
        s = _LEADING_YEAR.sub("", s).strip()
        if make:
            s = _strip_leading_words(s, make)
        tokens = s.split()
        while tokens and tokens[0].upper() in FUEL_TOKENS:
            tokens.pop(0)
        while tokens and tokens[-1].upper() in FUEL_TOKENS:
            tokens.pop()
        s = " ".join(tokens)
        if s == before:
            break
    return s


def derive_variant(compound_model: Any, base_model: Any) -> str:
    """
    Remainder of a compound model string after its canonical model/range prefix.

    derive_variant("FIESTA ZETEC TDCI", "Fiesta") -> "ZETEC TDCI"
    Returns "" when the prefix does not match on a word boundary or nothing remains.
    """
    compound = _collapse(compound_model)
    base = _collapse(base_model)
    if not compound or not base or len(base) >= len(compound):
        return ""
    if not compound.upper().startswith(base.upper()):
        return ""
    tail = compound[len(base):]
    if not tail.startswith(" "):
        return ""
    return tail.strip()


def normalize_vrm(raw: Any) -> str:
    """Registration mark as used for lookups: trimmed and uppercased."""
    if raw is None:
        return ""
    return str(raw).strip().upper()
