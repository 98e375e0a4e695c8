"""Program constants for the constant-product AMM.

Centralizes seed prefixes and well-known program ids.
"""

from cpamm.safe_int import U16_MAX, U64_MAX

# Basis-point denominator for the swap fee (10_000 bps = 100%)
BPS_DENOMINATOR = 10_000

# Seed prefixes for program-derived addresses
CONFIG_SEED = b"config"
LP_MINT_SEED = b"lp"

# Decimals of the LP mint created at initialization
LP_DECIMALS = 6

# Program ids (32-byte keys as 0x-prefixed hex)
AMM_PROGRAM_ID = "0x" + "5f1a7a9e3c0d4b8a" * 4
TOKEN_PROGRAM_ID = "0x" + "06ddf6e1d765a193" * 4
ASSOCIATED_TOKEN_PROGRAM_ID = "0x" + "8c97258f4e2489f1" * 4

__all__ = [
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "AMM_PROGRAM_ID",
    "BPS_DENOMINATOR",
    "CONFIG_SEED",
    "LP_DECIMALS",
    "LP_MINT_SEED",
    "TOKEN_PROGRAM_ID",
    "U16_MAX",
    "U64_MAX",
]
