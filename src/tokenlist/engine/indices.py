"""Derived lookup structures built from a token list document."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from ..schema import TokenListDocument

Token = Mapping[str, Any]

CURATION_FLAG = "isRainbowCurated"

NATIVE_TOKEN: Token = MappingProxyType({
    "address": "eth",
    "decimals": 18,
    "isRainbowCurated": True,
    "isVerified": True,
    "name": "Ethereum",
    "symbol": "ETH",
    "uniqueId": "eth",
})


@dataclass(frozen=True)
class DerivedIndices:
    """Lookup tables derived from one accepted document.

    All maps, and the tokens inside them, are read-only views; a new
    document always produces a new instance.

    Parameters
    ----------
    full:
        Every token keyed by lowercased address, native token first.
    curated:
        Subset of ``full`` whose curation flag is set.
    safe_names:
        Lowercased curated names and symbols mapped to their original spelling.
    """

    full: Mapping[str, Token]
    curated: Mapping[str, Token]
    safe_names: Mapping[str, str]


def normalize_token(raw: Mapping[str, Any]) -> Token:
    address = raw["address"].lower()
    token: Dict[str, Any] = {
        "address": address,
        "decimals": raw.get("decimals"),
        "name": raw.get("name"),
        "symbol": raw.get("symbol"),
        "uniqueId": address,
    }
    token.update(raw.get("extensions") or {})
    return MappingProxyType(token)


def build_indices(document: TokenListDocument) -> DerivedIndices:
    """Build fresh indices for ``document``.

    Later tokens win when two entries share an address.
    """

    tokens: List[Token] = [MappingProxyType(dict(NATIVE_TOKEN))]
    tokens.extend(normalize_token(raw) for raw in document.tokens)
    curated = [t for t in tokens if t.get(CURATION_FLAG)]

    safe_names: Dict[str, str] = {}
    for token in curated:
        for ident in (token.get("name"), token.get("symbol")):
            if isinstance(ident, str):
                safe_names[ident.lower()] = ident

    return DerivedIndices(
        full=MappingProxyType({t["address"]: t for t in tokens}),
        curated=MappingProxyType({t["address"]: t for t in curated}),
        safe_names=MappingProxyType(safe_names),
    )


__all__ = [
    "CURATION_FLAG",
    "DerivedIndices",
    "NATIVE_TOKEN",
    "Token",
    "build_indices",
    "normalize_token",
]
