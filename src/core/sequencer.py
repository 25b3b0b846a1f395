# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# THE SEQUENCER - ORDERED DEPLOYMENT
# -----------------------------------------------------------------------------
# Responsibility: Deploy a validated list of steps one after another,
# feeding each deployed address into the constructor arguments and library
# links of the steps that follow.
#
# Pipeline per step: Resolve refs -> Link libraries -> Deploy -> Record
#
# Steps never overlap: step N+1 starts only after step N's deploy call has
# settled. The first failure stops the session; nothing already deployed is
# rolled back (on-chain deployments are permanent).
# -----------------------------------------------------------------------------

import asyncio
from typing import Any, Protocol, Sequence

from rich.console import Console
from rich.markup import escape

from src.core.errors import DeploymentFailed, UnresolvedDependency
from src.core.plan import validate_steps
from src.domain.models import (
    AddressRef,
    DeploymentResult,
    DeploymentStatus,
    DeploymentStep,
)

console = Console()


class DeploymentBackend(Protocol):
    """
    Protocol for deployment backends - the network side of a session.

    Implementations: SimulatedBackend (dry runs, tests), Web3Backend (RPC).
    """

    async def link(self, library_name: str, library_address: str, into_artifact: str) -> None:
        """Bind a deployed library address into an artifact's bytecode."""
        ...

    async def deploy(
        self, artifact_name: str, constructor_args: list[Any], libraries: dict[str, str]
    ) -> str:
        """Deploy an artifact and return its address once confirmed."""
        ...


class Sequencer:
    """
    Runs one deployment session per call to run().

    Not idempotent: every run deploys fresh instances and returns fresh
    addresses, even for an identical step list.
    """

    def __init__(self, backend: DeploymentBackend, timeout: float | None = None) -> None:
        """
        Initialize the Sequencer.

        Args:
            backend: Network side that links and deploys artifacts.
            timeout: Optional limit in seconds for each backend call.
        """
        self._backend = backend
        self._timeout = timeout

    async def run(self, steps: Sequence[DeploymentStep]) -> dict[str, DeploymentResult]:
        """
        Deploy every step in order.

        Returns:
            Mapping of step name to DeploymentResult, all DEPLOYED.

        Raises:
            CyclicDependency: The steps fail validation; nothing is deployed.
            UnresolvedDependency: A reference has no deployed address.
            DeploymentFailed: The backend rejected a step. The error's
                `results` holds every earlier step as DEPLOYED and the
                failing step as FAILED.
        """
        steps = list(steps)
        validate_steps(steps)

        results: dict[str, DeploymentResult] = {}
        if not steps:
            return results

        steps_by_name = {step.name: step for step in steps}
        console.print(f"[cyan][SEQUENCER] Starting session: {len(steps)} steps[/cyan]")
        for step in steps:
            result = DeploymentResult(name=step.name)
            results[step.name] = result
            try:
                result.address = await self._run_step(step, results, steps_by_name)
            except (UnresolvedDependency, DeploymentFailed) as e:
                result.status = DeploymentStatus.FAILED
                result.error = str(e)
                e.results = dict(results)
                console.print(f"[red][SEQUENCER] Aborted at {step.name}: {escape(str(e))}[/red]")
                raise
            result.status = DeploymentStatus.DEPLOYED
            console.print(f"[green][SEQUENCER] Deployed {step.name} at {result.address}[/green]")

        console.print(f"[green][SEQUENCER] Session complete: {len(results)} deployed[/green]")
        return results

    async def _run_step(
        self,
        step: DeploymentStep,
        results: dict[str, DeploymentResult],
        steps_by_name: dict[str, DeploymentStep],
    ) -> str:
        """
        Resolve, link and deploy a single step. Returns the new address.

        Libraries are keyed by the library step's artifact name, which is
        what the placeholder in the compiled bytecode is derived from.
        """
        args = [self._resolve(step, arg, results) for arg in step.constructor_args]
        libraries = {
            steps_by_name[link].artifact_name: self._resolve(step, AddressRef(ref=link), results)
            for link in step.library_links
        }

        for library_name, library_address in libraries.items():
            console.print(f"[cyan][SEQUENCER] Linking {library_name} into {step.artifact_name}[/cyan]")
            await self._call(
                step,
                f"link {library_name}",
                self._backend.link(library_name, library_address, step.artifact_name),
            )

        console.print(f"[cyan][SEQUENCER] Deploying {step.name}...[/cyan]")
        address = await self._call(
            step, "deploy", self._backend.deploy(step.artifact_name, args, libraries)
        )
        if not address:
            raise DeploymentFailed(f"Backend returned no address for '{step.name}'", step=step.name)
        return address

    def _resolve(self, step: DeploymentStep, arg: Any, results: dict[str, DeploymentResult]) -> Any:
        """Swap an AddressRef for the referenced step's address; literals pass through."""
        if not isinstance(arg, AddressRef):
            return arg

        target = results.get(arg.ref)
        if target is None or not target.is_deployed:
            raise UnresolvedDependency(
                f"Step '{step.name}' needs '{arg.ref}', which has not been deployed",
                step=step.name,
                reference=arg.ref,
            )
        return target.address

    async def _call(self, step: DeploymentStep, action: str, coro) -> Any:
        """Await a backend call, turning any failure into DeploymentFailed."""
        try:
            if self._timeout is None:
                return await coro
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            if self._timeout is None:
                raise DeploymentFailed(f"{action} for '{step.name}' failed: {e}", step=step.name) from e
            raise DeploymentFailed(
                f"{action} for '{step.name}' timed out after {self._timeout}s", step=step.name
            ) from e
        except Exception as e:
            raise DeploymentFailed(f"{action} for '{step.name}' failed: {e}", step=step.name) from e


async def run_deployment(
    steps: Sequence[DeploymentStep],
    backend: DeploymentBackend,
    timeout: float | None = None,
) -> dict[str, DeploymentResult]:
    """Run a single deployment session. See Sequencer.run()."""
    return await Sequencer(backend, timeout=timeout).run(steps)
