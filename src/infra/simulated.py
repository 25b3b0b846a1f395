# -----------------------------------------------------------------------------
# SIMULATED BACKEND - DRY RUNS
# -----------------------------------------------------------------------------
# An in-memory chain: every deploy call mints a new pseudo-address, every
# link call is recorded. Used by `chainwright deploy --dry-run` to check a
# plan end to end without touching a network.
# -----------------------------------------------------------------------------

import asyncio
import hashlib
import itertools
import uuid
from typing import Any

from rich.console import Console

console = Console()


class SimulatedBackend:
    """
    DeploymentBackend that never leaves the process.

    Addresses come from a per-instance salt plus a call counter, so two
    runs (or two instances) never hand out the same address.
    """

    def __init__(self, latency: float = 0.0, fail_on: set[str] | None = None) -> None:
        """
        Args:
            latency: Seconds to sleep per call, to mimic confirmation time.
            fail_on: Artifact names whose deploy call should raise.
        """
        self._latency = latency
        self._fail_on = set(fail_on or ())
        self._salt = uuid.uuid4().hex
        self._counter = itertools.count(1)
        self.deployments: list[tuple[str, list[Any], dict[str, str]]] = []
        self.links: list[tuple[str, str, str]] = []

    def _next_address(self, artifact_name: str) -> str:
        seed = f"{self._salt}:{next(self._counter)}:{artifact_name}".encode()
        return "0x" + hashlib.sha256(seed).hexdigest()[:40]

    async def link(self, library_name: str, library_address: str, into_artifact: str) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)
        self.links.append((library_name, library_address, into_artifact))

    async def deploy(
        self, artifact_name: str, constructor_args: list[Any], libraries: dict[str, str]
    ) -> str:
        if self._latency:
            await asyncio.sleep(self._latency)
        if artifact_name in self._fail_on:
            raise RuntimeError(f"simulated revert deploying {artifact_name}")
        self.deployments.append((artifact_name, list(constructor_args), dict(libraries)))
        address = self._next_address(artifact_name)
        console.print(f"[dim][SIMULATED] {artifact_name} -> {address}[/dim]")
        return address
