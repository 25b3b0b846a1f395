# -----------------------------------------------------------------------------
# DEPLOYMENT REGISTRY (JSON)
# -----------------------------------------------------------------------------
# Responsibility: Keep a record of what a session deployed, pass or fail.
# The file is written after every session, including aborted ones, so the
# addresses of contracts that are already live are never lost.
#
# Layout:
# {
#   "network": "http://localhost:8545",
#   "recorded_at": "2026-01-01T00:00:00",
#   "contracts": {"RootChain": {"name": ..., "status": ..., "address": ...}}
# }
# -----------------------------------------------------------------------------

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from rich.console import Console

from src.core.errors import PlanError
from src.domain.models import DeploymentResult

console = Console()


class DeploymentRecord(BaseModel):
    """
    Pydantic model for a saved session.

    Why Pydantic: the file is read back by other tools (and by hand), so
    it is validated on the way in as well as out.
    """

    network: str | None = None
    recorded_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    contracts: dict[str, DeploymentResult] = Field(default_factory=dict)


def save_deployment(
    results: dict[str, DeploymentResult], path: Path | str, network: str | None = None
) -> Path:
    """Write session results to `path` as JSON and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    record = DeploymentRecord(network=network, contracts=results)
    with open(path, "w") as f:
        json.dump(record.model_dump(mode="json"), f, indent=2)
    console.print(f"[cyan][REGISTRY] Saved {len(results)} results to {path}[/cyan]")
    return path


def load_deployment(path: Path | str) -> DeploymentRecord:
    """
    Read a saved session.

    Raises:
        PlanError: File missing or not a deployment record.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
        return DeploymentRecord(**data)
    except FileNotFoundError as e:
        raise PlanError(f"Deployment record not found: {path}", path) from e
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise PlanError(f"Invalid deployment record {path}: {e}", path) from e
