"""Signing capabilities accepted by the reserve ledger.

Two kinds of authority can move balances:

- Signer: a caller key. Signature verification happens before a request
  reaches the program, so a Signer is taken as already verified.
- LedgerAuthority: the capability to act for a program-derived address.
  Only the ledger issues it (ReserveLedger.program_authority), for a
  program id and the seeds of an address that program controls. It is
  handed to the program's own handlers and never to callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

# Issuance token; LedgerAuthority refuses construction without it
_ISSUER = object()


class Authority(Protocol):
    """Anything carrying the key an account owner or mint authority must match."""

    @property
    def key(self) -> str: ...


@dataclass(frozen=True)
class Signer:
    """A verified caller key."""

    key: str


class LedgerAuthority:
    """Opaque capability to sign for a program-derived address."""

    __slots__ = ("_key", "_program_id")

    def __init__(self, key: str, program_id: str, *, _issuer: object = None) -> None:
        if _issuer is not _ISSUER:
            raise TypeError("LedgerAuthority is issued by the ledger, not constructed")
        self._key = key
        self._program_id = program_id

    @property
    def key(self) -> str:
        return self._key

    @property
    def program_id(self) -> str:
        return self._program_id

    def __repr__(self) -> str:
        return f"LedgerAuthority({self._key[:10]}..., program={self._program_id[:10]}...)"


def issue_ledger_authority(key: str, program_id: str) -> LedgerAuthority:
    """Create a LedgerAuthority. Called by the ledger only."""
    return LedgerAuthority(key, program_id, _issuer=_ISSUER)
