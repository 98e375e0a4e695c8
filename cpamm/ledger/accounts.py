"""Account records held by the reserve ledger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class Mint:
    """A fungible asset: total supply and the key allowed to mint it."""

    address: str
    decimals: int
    mint_authority: str
    supply: int = 0


@dataclass
class TokenAccount:
    """A balance of one mint, owned by one key."""

    address: str
    mint: str
    owner: str
    amount: int = 0


@dataclass
class ProgramAccount:
    """State account owned by a program (e.g. a pool config)."""

    address: str
    owner: str
    data: Any
