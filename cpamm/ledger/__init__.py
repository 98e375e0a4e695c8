"""Reserve ledger collaborator: accounts, authorities and address derivation."""

from cpamm.ledger.accounts import Mint, ProgramAccount, TokenAccount
from cpamm.ledger.address import (
    find_config_address,
    find_lp_mint_address,
    find_program_address,
    get_associated_token_address,
)
from cpamm.ledger.authority import Authority, LedgerAuthority, Signer
from cpamm.ledger.ledger import ReserveLedger

__all__ = [
    # Accounts
    "Mint",
    "ProgramAccount",
    "TokenAccount",
    # Authorities
    "Authority",
    "LedgerAuthority",
    "Signer",
    # Addresses
    "find_config_address",
    "find_lp_mint_address",
    "find_program_address",
    "get_associated_token_address",
    # Ledger
    "ReserveLedger",
]
