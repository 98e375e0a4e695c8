"""In-memory reserve ledger.

The ledger owns every balance the AMM touches: user token accounts, pool
vaults and the LP mint supply. It exposes the three primitives the program
needs (transfer, mint_to, burn), each checked against the authority that
signs for it, plus an all-or-nothing transaction scope.

Accounts owned by a program-derived address (pool vaults, the LP mint) move
only under a LedgerAuthority. A Signer carrying the same key is refused.

Balances and supplies are u64; a credit that would exceed 2^64-1 fails.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import fields
from typing import Any

import structlog

from cpamm.errors import (
    AccountAlreadyInUse,
    AccountNotFound,
    ArithmeticOverflow,
    InsufficientFunds,
    InvalidAccount,
    InvalidAmount,
    Unauthorized,
)
from cpamm.ledger.accounts import Mint, ProgramAccount, TokenAccount
from cpamm.ledger.address import (
    create_program_address,
    get_associated_token_address,
    is_program_address,
)
from cpamm.ledger.authority import Authority, LedgerAuthority, issue_ledger_authority
from cpamm.models.types import normalize_key
from cpamm.safe_int import U64_MAX

logger = structlog.get_logger()

Account = Mint | TokenAccount | ProgramAccount


class ReserveLedger:
    """Account store with checked transfer, mint and burn.

    Mutations outside a transaction() scope apply immediately. Inside one,
    the ledger journals each account before its first change; any exception
    restores the journaled accounts and removes accounts created in the
    scope. Nested scopes join the outermost one.
    """

    def __init__(self) -> None:
        self._mints: dict[str, Mint] = {}
        self._token_accounts: dict[str, TokenAccount] = {}
        self._program_accounts: dict[str, ProgramAccount] = {}
        self._depth = 0
        # address -> (store, copy before first change, or None if created in scope)
        self._journal: dict[str, tuple[dict[str, Any], Account | None]] = {}

    # --- Transactions ---

    @contextmanager
    def transaction(self) -> Iterator[ReserveLedger]:
        """All-or-nothing scope over every ledger mutation."""
        if self._depth > 0:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._journal = {}
        self._depth = 1
        try:
            yield self
        except BaseException:
            self._rollback()
            logger.debug("ledger_rollback")
            raise
        finally:
            self._journal = {}
            self._depth = 0

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def _record(self, store: dict[str, Any], account: Account) -> None:
        """Journal account before it is first changed in the current scope."""
        if self._depth > 0 and account.address not in self._journal:
            self._journal[account.address] = (store, copy.copy(account))

    def _record_created(self, store: dict[str, Any], address: str) -> None:
        if self._depth > 0:
            self._journal.setdefault(address, (store, None))

    def _rollback(self) -> None:
        for address, (store, saved) in self._journal.items():
            if saved is None:
                store.pop(address, None)
                continue
            live = store[address]
            for field in fields(saved):
                setattr(live, field.name, getattr(saved, field.name))

    # --- Account creation ---

    def exists(self, address: str) -> bool:
        """True if any account (mint, token or program) lives at address."""
        key = normalize_key(address)
        return key in self._mints or key in self._token_accounts or key in self._program_accounts

    def _claim(self, address: str) -> str:
        key = normalize_key(address, validate=True)
        if self.exists(key):
            raise AccountAlreadyInUse(f"Account {key} already in use")
        return key

    def create_mint(self, address: str, decimals: int, mint_authority: str) -> Mint:
        """Create an empty mint.

        Raises:
            AccountAlreadyInUse: If address is occupied
        """
        key = self._claim(address)
        mint = Mint(
            address=key,
            decimals=decimals,
            mint_authority=normalize_key(mint_authority, validate=True),
        )
        self._mints[key] = mint
        self._record_created(self._mints, key)
        logger.debug("mint_created", mint=key[-8:], decimals=decimals)
        return mint

    def create_token_account(self, address: str, mint: str, owner: str) -> TokenAccount:
        """Create an empty token account for mint, owned by owner.

        Raises:
            AccountNotFound: If mint does not exist
            AccountAlreadyInUse: If address is occupied
        """
        mint_account = self.get_mint(mint)
        key = self._claim(address)
        account = TokenAccount(
            address=key,
            mint=mint_account.address,
            owner=normalize_key(owner, validate=True),
        )
        self._token_accounts[key] = account
        self._record_created(self._token_accounts, key)
        return account

    def create_associated_token_account(self, owner: str, mint: str) -> TokenAccount:
        """Create owner's associated token account for mint."""
        return self.create_token_account(get_associated_token_address(owner, mint), mint, owner)

    def get_or_create_associated_token_account(self, owner: str, mint: str) -> TokenAccount:
        """Return owner's associated token account for mint, creating it if missing."""
        address = get_associated_token_address(owner, mint)
        if address in self._token_accounts:
            return self._token_accounts[address]
        return self.create_token_account(address, mint, owner)

    def create_program_account(self, address: str, owner: str, data: Any) -> ProgramAccount:
        """Create a state account owned by a program.

        Raises:
            AccountAlreadyInUse: If address is occupied
        """
        key = self._claim(address)
        account = ProgramAccount(address=key, owner=normalize_key(owner, validate=True), data=data)
        self._program_accounts[key] = account
        self._record_created(self._program_accounts, key)
        return account

    # --- Lookups ---

    def get_mint(self, address: str) -> Mint:
        mint = self._mints.get(normalize_key(address))
        if mint is None:
            raise AccountNotFound(f"Mint {address} not found")
        return mint

    def get_token_account(self, address: str) -> TokenAccount:
        account = self._token_accounts.get(normalize_key(address))
        if account is None:
            raise AccountNotFound(f"Token account {address} not found")
        return account

    def get_program_account(self, address: str) -> ProgramAccount:
        account = self._program_accounts.get(normalize_key(address))
        if account is None:
            raise AccountNotFound(f"Program account {address} not found")
        return account

    def balance(self, address: str) -> int:
        """Token balance of an account (0 if it does not exist)."""
        account = self._token_accounts.get(normalize_key(address))
        return account.amount if account is not None else 0

    def supply(self, mint: str) -> int:
        return self.get_mint(mint).supply

    # --- Authorities ---

    def program_authority(self, program_id: str, seeds: Sequence[bytes]) -> LedgerAuthority:
        """Issue the signing capability for a program-derived address.

        seeds must include the bump byte, exactly as stored by the program.
        """
        address = create_program_address(seeds, program_id)
        return issue_ledger_authority(address, normalize_key(program_id))

    @staticmethod
    def _authorize(authority: Authority, expected: str, role: str) -> None:
        """Check authority signs for expected.

        Program-derived keys sign only through a LedgerAuthority.
        """
        if authority.key != expected:
            raise Unauthorized(f"{authority.key} cannot sign as {role} {expected}")
        if not isinstance(authority, LedgerAuthority) and is_program_address(expected):
            raise Unauthorized(f"{role.capitalize()} {expected} is a program address")

    # --- Primitives ---

    @staticmethod
    def _check_amount(amount: int) -> None:
        if amount < 0 or amount > U64_MAX:
            raise InvalidAmount(f"Amount out of u64 range: {amount}")

    @staticmethod
    def _credit(current: int, amount: int, what: str) -> int:
        result = current + amount
        if result > U64_MAX:
            raise ArithmeticOverflow(f"{what} overflow: {current} + {amount}")
        return result

    def transfer(self, source: str, destination: str, amount: int, authority: Authority) -> None:
        """Move amount between two accounts of the same mint.

        Raises:
            AccountNotFound: If either account is missing
            InvalidAccount: If the accounts hold different mints
            Unauthorized: If authority cannot sign for the owner of source
            InsufficientFunds: If source holds less than amount
            ArithmeticOverflow: If destination would exceed u64
        """
        self._check_amount(amount)
        src = self.get_token_account(source)
        dst = self.get_token_account(destination)
        if src.mint != dst.mint:
            raise InvalidAccount(f"Mint mismatch: {src.mint} != {dst.mint}")
        self._authorize(authority, src.owner, "owner")
        if src.amount < amount:
            raise InsufficientFunds(f"Balance {src.amount} < {amount}")
        if src.address == dst.address:
            return

        new_dst = self._credit(dst.amount, amount, "Balance")
        self._record(self._token_accounts, src)
        self._record(self._token_accounts, dst)
        src.amount -= amount
        dst.amount = new_dst

    def mint_to(self, mint: str, destination: str, amount: int, authority: Authority) -> None:
        """Create amount new units of mint in destination.

        Raises:
            Unauthorized: If authority is not the mint authority
            InvalidAccount: If destination holds a different mint
            ArithmeticOverflow: If supply or balance would exceed u64
        """
        self._check_amount(amount)
        mint_account = self.get_mint(mint)
        dst = self.get_token_account(destination)
        if dst.mint != mint_account.address:
            raise InvalidAccount(f"Account {dst.address} does not hold mint {mint_account.address}")
        self._authorize(authority, mint_account.mint_authority, "mint authority")

        new_supply = self._credit(mint_account.supply, amount, "Supply")
        new_balance = self._credit(dst.amount, amount, "Balance")
        self._record(self._mints, mint_account)
        self._record(self._token_accounts, dst)
        mint_account.supply = new_supply
        dst.amount = new_balance

    def burn(self, mint: str, source: str, amount: int, authority: Authority) -> None:
        """Destroy amount units of mint held in source.

        Raises:
            Unauthorized: If authority does not own source
            InvalidAccount: If source holds a different mint
            InsufficientFunds: If source holds less than amount
        """
        self._check_amount(amount)
        mint_account = self.get_mint(mint)
        src = self.get_token_account(source)
        if src.mint != mint_account.address:
            raise InvalidAccount(f"Account {src.address} does not hold mint {mint_account.address}")
        self._authorize(authority, src.owner, "owner")
        if src.amount < amount:
            raise InsufficientFunds(f"Balance {src.amount} < {amount}")

        self._record(self._mints, mint_account)
        self._record(self._token_accounts, src)
        src.amount -= amount
        mint_account.supply -= amount
