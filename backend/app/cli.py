"""Management CLI for branch onboarding.

Usage:
    python -m app.cli create-tables              # Create all tables (dev / test databases)
    python -m app.cli setup-status <branch_id>   # Print step progress for a branch
    python -m app.cli readiness <branch_id>      # Print downstream service readiness
"""

import asyncio
import sys

from app.database import Base, async_session, engine
from app.middleware.exceptions import BackofficeException
from app.models import *  # noqa: F401,F403 (registers all tables on Base.metadata)
from app.services.setup_orchestrator import SetupOrchestrator


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables created.")


async def setup_status(branch_id: str):
    async with async_session() as db:
        snapshot = await SetupOrchestrator(db).get_status(branch_id)
    process = snapshot.process
    print(f"  Branch {process.branch_id}: {process.status}, step {process.current_step}, {snapshot.progress}%")
    for s in snapshot.steps:
        mark = "x" if s.is_completed else " "
        optional = " (optional)" if s.is_optional else ""
        print(f"  [{mark}] {s.step}. {s.name}{optional}")


async def readiness(branch_id: str):
    async with async_session() as db:
        report = await SetupOrchestrator(db).get_init_status(branch_id)
    for name, s in report.status.services.items():
        state = "OK" if s.initialized else "MISSING"
        print(f"  {name:<10} {state:<8} {s.count}")
    print(f"\nFully initialized: {report.status.is_fully_initialized}")
    print(f"Setup completed:   {report.setup_completed}")


def main(argv: list[str]) -> int:
    cmd = argv[1] if len(argv) > 1 else ""
    try:
        if cmd == "create-tables":
            asyncio.run(create_tables())
        elif cmd == "setup-status" and len(argv) > 2:
            asyncio.run(setup_status(argv[2]))
        elif cmd == "readiness" and len(argv) > 2:
            asyncio.run(readiness(argv[2]))
        else:
            print(__doc__)
            return 1
    except BackofficeException as exc:
        print(f"  {exc.error_code}: {exc.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
