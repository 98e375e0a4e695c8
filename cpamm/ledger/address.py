"""Deterministic address derivation.

Program-derived addresses (PDAs) and the ed25519 curve check come from
solders. Keys travel through the rest of the package as 0x-prefixed hex,
so this module converts at the boundary.

A PDA is off the ed25519 curve and therefore has no private key: only the
deriving program can sign for it, through the ledger. Every PDA here uses
its canonical bump, the highest bump whose digest is off the curve.

Associated token accounts are PDAs of the associated-token program seeded by
(owner, token program, mint), so every (owner, mint) pair has one address.
"""

from __future__ import annotations

from collections.abc import Sequence

from solders.pubkey import Pubkey

from cpamm.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    CONFIG_SEED,
    LP_MINT_SEED,
    TOKEN_PROGRAM_ID,
)
from cpamm.models.types import normalize_key

MAX_SEEDS = 16
MAX_SEED_LENGTH = 32


def key_to_bytes(key: str) -> bytes:
    """Decode a 0x-prefixed 32-byte hex key."""
    return bytes.fromhex(normalize_key(key, validate=True)[2:])


def bytes_to_key(raw: bytes) -> str:
    """Encode 32 raw bytes as a 0x-prefixed hex key."""
    if len(raw) != 32:
        raise ValueError(f"Key must be 32 bytes, got {len(raw)}")
    return "0x" + raw.hex()


def to_pubkey(key: str) -> Pubkey:
    return Pubkey(key_to_bytes(key))


def from_pubkey(pubkey: Pubkey) -> str:
    return bytes_to_key(bytes(pubkey))


def is_on_curve(raw: bytes) -> bool:
    """Check whether 32 bytes decompress to an ed25519 point."""
    return Pubkey(raw).is_on_curve()


def is_program_address(key: str) -> bool:
    """True for off-curve keys, which no caller can sign for."""
    return not to_pubkey(key).is_on_curve()


class BumpError(ValueError):
    """Bump byte is missing or is not the canonical one for its seeds."""


def _validate_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) > MAX_SEEDS:
        raise ValueError(f"Too many seeds: {len(seeds)} > {MAX_SEEDS}")
    for i, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LENGTH:
            raise ValueError(f"Seed {i} is {len(seed)} bytes, max {MAX_SEED_LENGTH}")


def find_program_address(seeds: Sequence[bytes], program_id: str) -> tuple[str, int]:
    """Find the canonical (address, bump) for seeds under program_id.

    Raises:
        ValueError: If the seeds (plus the bump) exceed the seed limits
    """
    _validate_seeds([*seeds, b"\x00"])
    pubkey, bump = Pubkey.find_program_address(list(seeds), to_pubkey(program_id))
    return from_pubkey(pubkey), bump


def create_program_address(seeds: Sequence[bytes], program_id: str) -> str:
    """Address of seeds whose last element is the canonical bump byte.

    Raises:
        BumpError: If the last seed is not the canonical bump
        ValueError: If the seeds exceed the seed limits
    """
    _validate_seeds(seeds)
    if not seeds or len(seeds[-1]) != 1:
        raise BumpError("Last seed must be a single bump byte")
    address, bump = find_program_address(seeds[:-1], program_id)
    if seeds[-1][0] != bump:
        raise BumpError(f"Bump {seeds[-1][0]} is not canonical ({bump})")
    return address


def get_associated_token_address(owner: str, mint: str) -> str:
    """Address of owner's canonical token account for mint."""
    address, _ = find_program_address(
        [key_to_bytes(owner), key_to_bytes(TOKEN_PROGRAM_ID), key_to_bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


def config_seeds(seed: int) -> list[bytes]:
    """Seeds of a pool config address: ["config", seed as u64 little-endian]."""
    return [CONFIG_SEED, seed.to_bytes(8, "little")]


def find_config_address(seed: int, program_id: str) -> tuple[str, int]:
    """Derive a pool's config address and bump."""
    return find_program_address(config_seeds(seed), program_id)


def find_lp_mint_address(config: str, program_id: str) -> tuple[str, int]:
    """Derive a pool's LP mint address and bump: ["lp", config]."""
    return find_program_address([LP_MINT_SEED, key_to_bytes(config)], program_id)
