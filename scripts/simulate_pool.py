#!/usr/bin/env python3
"""CLI script for simulating trading activity against one pool.

Creates two asset mints and a pool on a fresh ledger, seeds liquidity from a
provider, runs random swaps from a set of traders, then withdraws the
provider's position and reports how the reserve product grew.

Usage:
    python scripts/simulate_pool.py --fee-bps 30 --swaps 500

    # Reproducible run with debug logging
    python scripts/simulate_pool.py --seed 7 --rng-seed 42 --verbose
"""

import argparse
import logging
import random
import sys
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cpamm.errors import AmmError  # noqa: E402
from cpamm.ledger import ReserveLedger, Signer  # noqa: E402
from cpamm.ledger.address import is_program_address  # noqa: E402
from cpamm.models.instructions import (  # noqa: E402
    DepositArgs,
    InitializeArgs,
    SwapArgs,
    WithdrawArgs,
)
from cpamm.program import AmmProgram  # noqa: E402

logger = structlog.get_logger()


def make_key(label: str, index: int) -> str:
    """Deterministic on-curve 32-byte key for a simulated participant."""
    prefix = label.encode().hex()[:16].ljust(16, "0")
    nonce = 0
    while True:
        key = "0x" + prefix + f"{index:040x}{nonce:08x}"
        if not is_program_address(key):
            return key
        nonce += 1


def fund(ledger: ReserveLedger, mint_authority: Signer, mint: str, owner: str, amount: int) -> None:
    """Create owner's token account for mint and mint amount into it."""
    account = ledger.get_or_create_associated_token_account(owner, mint)
    ledger.mint_to(mint, account.address, amount, mint_authority)


def main() -> int:
    """Main entry point for the pool simulation."""
    parser = argparse.ArgumentParser(
        description="Simulate liquidity and random swaps against a constant-product pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--seed", type=int, default=1, help="Pool seed (default: 1)")
    parser.add_argument(
        "--fee-bps", type=int, default=30, help="Swap fee in basis points (default: 30)"
    )
    parser.add_argument(
        "--liquidity",
        type=int,
        default=1_000_000_000,
        help="Initial amount of each asset deposited (default: 1e9)",
    )
    parser.add_argument(
        "--swaps", type=int, default=200, help="Number of random swaps (default: 200)"
    )
    parser.add_argument(
        "--traders", type=int, default=5, help="Number of trading accounts (default: 5)"
    )
    parser.add_argument(
        "--max-trade-bps",
        type=int,
        default=100,
        help="Largest trade as basis points of the source reserve (default: 100)",
    )
    parser.add_argument("--rng-seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    if args.liquidity <= 0 or args.swaps < 0 or args.traders <= 0:
        print("Error: --liquidity and --traders must be positive, --swaps non-negative")
        return 1

    rng = random.Random(args.rng_seed)
    ledger = ReserveLedger()
    program = AmmProgram(ledger)

    issuer = Signer(make_key("issuer", 0))
    mint_x = ledger.create_mint(make_key("mintx", 0), 6, issuer.key).address
    mint_y = ledger.create_mint(make_key("minty", 0), 6, issuer.key).address

    provider = Signer(make_key("provider", 0))
    fund(ledger, issuer, mint_x, provider.key, args.liquidity)
    fund(ledger, issuer, mint_y, provider.key, args.liquidity)

    traders = [Signer(make_key("trader", i)) for i in range(args.traders)]
    for trader in traders:
        fund(ledger, issuer, mint_x, trader.key, args.liquidity)
        fund(ledger, issuer, mint_y, trader.key, args.liquidity)

    try:
        program.initialize(
            provider,
            InitializeArgs(seed=args.seed, fee_bps=args.fee_bps, mint_x=mint_x, mint_y=mint_y),
        )
        program.deposit(
            args.seed,
            provider,
            DepositArgs(lp_amount=args.liquidity, max_x=args.liquidity, max_y=args.liquidity),
        )
    except AmmError as err:
        print(f"Error: could not set up pool: {err.code}: {err}")
        return 1

    initial = program.pool_state(args.seed)
    initial_product = initial.reserve_x * initial.reserve_y

    executed = 0
    rejected: dict[str, int] = {}
    for _ in range(args.swaps):
        trader = rng.choice(traders)
        x_to_y = rng.random() < 0.5
        state = program.pool_state(args.seed)
        reserve_in = state.reserve_x if x_to_y else state.reserve_y
        amount_in = rng.randint(1, max(1, reserve_in * args.max_trade_bps // 10_000))
        try:
            program.swap(
                args.seed,
                trader,
                SwapArgs(amount_in=amount_in, min_amount_out=0, x_to_y=x_to_y),
            )
            executed += 1
        except AmmError as err:
            rejected[err.code] = rejected.get(err.code, 0) + 1

    final = program.pool_state(args.seed)
    final_product = final.reserve_x * final.reserve_y

    receipt = program.withdraw(
        args.seed,
        provider,
        WithdrawArgs(lp_amount=program.balance_of(provider.key, final.mint_lp), min_x=0, min_y=0),
    )

    print("=" * 60)
    print("Constant-Product Pool Simulation")
    print("=" * 60)
    print(f"Fee:              {args.fee_bps} bps")
    print(f"Swaps executed:   {executed}/{args.swaps}")
    for code, count in sorted(rejected.items()):
        print(f"  rejected {code}: {count}")
    print(f"Initial reserves: x={initial.reserve_x} y={initial.reserve_y}")
    print(f"Final reserves:   x={final.reserve_x} y={final.reserve_y}")
    print(f"Product growth:   {final_product / initial_product:.6f}x")
    print(f"Provider withdrew: x={receipt.amount_x} y={receipt.amount_y}")
    print(f"Swap events:      {len(program.events)}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
