"""API endpoints for the AMM program."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Path, Query

from cpamm.ledger.authority import Signer
from cpamm.models.requests import (
    DepositRequest,
    InitializeRequest,
    SwapRequest,
    WithdrawRequest,
)
from cpamm.models.results import (
    DepositReceipt,
    PoolState,
    SwapQuote,
    SwapReceipt,
    WithdrawReceipt,
)
from cpamm.program import AmmProgram, get_default_program
from cpamm.safe_int import U64_MAX

logger = structlog.get_logger()

router = APIRouter(prefix="/pools")


def get_program() -> AmmProgram:
    """Dependency provider for the program instance.

    Override this in tests to inject a program over a prepared ledger:
        app.dependency_overrides[get_program] = lambda: program

    Returns:
        The program that executes pool instructions.
    """
    return get_default_program()


ProgramDep = Annotated[AmmProgram, Depends(get_program)]
SeedPath = Annotated[int, Path(ge=0, le=U64_MAX, description="Pool seed")]


# Handlers are plain functions: FastAPI runs them in its threadpool and the
# program serializes them with its own lock.


@router.post("", status_code=201)
def initialize_pool(request: InitializeRequest, program: ProgramDep) -> PoolState:
    """Create a pool and return its initial (empty) state."""
    logger.info("received_initialize", seed=request.seed, fee_bps=request.fee_bps)
    pool = program.initialize(Signer(request.initializer), request)
    return program.pool_state(pool.seed)


@router.get("/{seed}")
def get_pool_state(seed: SeedPath, program: ProgramDep) -> PoolState:
    """Current config, reserves and LP supply of a pool."""
    return program.pool_state(seed)


@router.post("/{seed}/deposit")
def deposit(seed: SeedPath, request: DepositRequest, program: ProgramDep) -> DepositReceipt:
    """Add liquidity to a pool."""
    logger.info("received_deposit", seed=seed, lp_amount=request.lp_amount)
    return program.deposit(seed, Signer(request.user), request)


@router.post("/{seed}/swap")
def swap(seed: SeedPath, request: SwapRequest, program: ProgramDep) -> SwapReceipt:
    """Swap an exact input amount."""
    logger.info("received_swap", seed=seed, amount_in=request.amount_in, x_to_y=request.x_to_y)
    return program.swap(seed, Signer(request.user), request)


@router.post("/{seed}/withdraw")
def withdraw(seed: SeedPath, request: WithdrawRequest, program: ProgramDep) -> WithdrawReceipt:
    """Burn LP units for a share of the reserves."""
    logger.info("received_withdraw", seed=seed, lp_amount=request.lp_amount)
    return program.withdraw(seed, Signer(request.user), request)


@router.get("/{seed}/quote/swap")
def quote_swap(
    seed: SeedPath,
    program: ProgramDep,
    amount_in: Annotated[int, Query(ge=0, le=U64_MAX)],
    x_to_y: bool = True,
) -> SwapQuote:
    """Output of a prospective swap, without executing it."""
    return program.quote_swap(seed, amount_in, x_to_y)
