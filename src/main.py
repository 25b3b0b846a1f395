# -----------------------------------------------------------------------------
# CHAINWRIGHT - COMMAND LINE INTERFACE
# -----------------------------------------------------------------------------
# Responsibility: The two entry points operators use.
#
# Commands:
# - audit: Rank build artifacts by deployed size, flag those over a limit
# - deploy: Run a deployment plan against an RPC node (or --dry-run)
#
# Exit codes:
# - 0: Success / every artifact within the limit
# - 1: Deployment failed / at least one artifact over the limit
# - 2: Input error (unreadable directory, malformed artifact, bad plan)
# -----------------------------------------------------------------------------

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Load environment variables from .env
from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from web3.exceptions import Web3Exception

from src.core.auditor import audit_artifacts, format_report
from src.core.errors import (
    CyclicDependency,
    DeploymentFailed,
    DirectoryUnreadable,
    MalformedArtifact,
    PlanError,
    UnresolvedDependency,
)
from src.core.plan import PLAN_PATH, load_plan
from src.core.registry import save_deployment
from src.core.sequencer import run_deployment
from src.domain.models import DeploymentResult, DeploymentStatus
from src.infra.simulated import SimulatedBackend

console = Console()

VERSION = "1.0.0"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INPUT_ERROR = 2


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    return int(value) if value else None


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    return float(value) if value else None


def build_parser() -> argparse.ArgumentParser:
    """Configure top-level CLI parser and subcommands."""
    parser = argparse.ArgumentParser(
        prog="chainwright",
        description="Ordered contract deployment and artifact size auditing",
    )
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {VERSION}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    audit_parser = subparsers.add_parser("audit", help="Rank artifacts by deployed size")
    audit_parser.add_argument(
        "--dir",
        type=Path,
        default=Path(os.getenv("CHAINWRIGHT_BUILD_DIR", "build/contracts")),
        help="Artifact directory (default: $CHAINWRIGHT_BUILD_DIR or build/contracts)",
    )
    audit_parser.add_argument(
        "--threshold",
        type=int,
        default=_env_int("CHAINWRIGHT_SIZE_THRESHOLD"),
        metavar="BYTES",
        help="Flag artifacts larger than BYTES (default: $CHAINWRIGHT_SIZE_THRESHOLD)",
    )
    audit_parser.add_argument(
        "--skip-malformed",
        action="store_true",
        help="Warn about and skip malformed artifacts instead of aborting",
    )

    deploy_parser = subparsers.add_parser("deploy", help="Run a deployment plan")
    deploy_parser.add_argument(
        "--plan", type=Path, default=PLAN_PATH, help=f"Plan file (default: {PLAN_PATH})"
    )
    deploy_parser.add_argument(
        "--dry-run", action="store_true", help="Deploy against an in-memory simulated chain"
    )
    deploy_parser.add_argument(
        "--output", type=Path, default=None, help="Write results to this JSON file"
    )
    deploy_parser.add_argument(
        "--timeout",
        type=float,
        default=_env_float("CHAINWRIGHT_DEPLOY_TIMEOUT"),
        metavar="SEC",
        help="Per-step backend timeout (default: $CHAINWRIGHT_DEPLOY_TIMEOUT or none)",
    )
    return parser


def cmd_audit(args: argparse.Namespace) -> int:
    """Print the size report; exit 1 if anything is over the threshold."""
    if args.threshold is None:
        console.print("[red][ERROR] --threshold is required (or set CHAINWRIGHT_SIZE_THRESHOLD)[/red]")
        return EXIT_INPUT_ERROR

    try:
        entries = asyncio.run(
            audit_artifacts(args.dir, args.threshold, strict=not args.skip_malformed)
        )
    except (DirectoryUnreadable, MalformedArtifact, ValueError) as e:
        console.print(f"[red][ERROR] {escape(str(e))}[/red]")
        return EXIT_INPUT_ERROR

    for line in format_report(entries):
        print(line)

    return EXIT_FAILED if any(e.over_limit for e in entries) else EXIT_OK


def _print_results(results: dict[str, DeploymentResult]) -> None:
    table = Table(title="Deployment")
    table.add_column("Step", style="cyan")
    table.add_column("Status")
    table.add_column("Address")
    for result in results.values():
        style = "green" if result.is_deployed else "red"
        status = DeploymentStatus(result.status).value
        table.add_row(result.name, f"[{style}]{status}[/{style}]", result.address or "-")
    console.print(table)


def cmd_deploy(args: argparse.Namespace) -> int:
    """Run the plan; partial results are still printed and saved on failure."""
    try:
        plan = load_plan(args.plan)
    except (PlanError, CyclicDependency) as e:
        console.print(f"[red][ERROR] {escape(str(e))}[/red]")
        return EXIT_INPUT_ERROR

    network = "simulated"
    if args.dry_run:
        backend = SimulatedBackend()
    else:
        from src.infra.web3_client import Web3Backend

        try:
            backend = Web3Backend()
        except (ConnectionError, ValueError, Web3Exception) as e:
            console.print(f"[red][ERROR] {escape(str(e))}[/red]")
            return EXIT_INPUT_ERROR
        network = backend.rpc_url

    exit_code = EXIT_OK
    try:
        results = asyncio.run(run_deployment(plan.steps, backend, timeout=args.timeout))
    except (DeploymentFailed, UnresolvedDependency) as e:
        console.print(f"[red][ERROR] {escape(str(e))}[/red]")
        results = e.results
        exit_code = EXIT_FAILED

    _print_results(results)
    if args.output:
        save_deployment(results, args.output, network=network)
    return exit_code


COMMANDS = {
    "audit": cmd_audit,
    "deploy": cmd_deploy,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
