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
# THE PLAN - LOADING & VALIDATION
# -----------------------------------------------------------------------------
# Responsibility: Read a deployment plan from YAML and reject any plan whose
# references do not point strictly backwards. A rejected plan never reaches
# the backend: no transaction is sent for a plan that cannot finish.
#
# The order of steps in the file IS the dependency order. Nothing here
# sorts or reorders; it only checks.
# -----------------------------------------------------------------------------

import os
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError
from rich.console import Console

from src.core.errors import CyclicDependency, PlanError
from src.domain.models import DeploymentPlan, DeploymentStep, StepKind

console = Console()

# Plan file location
PLAN_PATH = Path(os.getenv("CHAINWRIGHT_PLAN", "deployment.yaml"))


def load_plan(path: Path | str = PLAN_PATH) -> DeploymentPlan:
    """
    Load and validate a deployment plan from a YAML file.

    Args:
        path: Path to the plan file.

    Returns:
        DeploymentPlan whose steps already passed validate_steps().

    Raises:
        PlanError: File missing, not YAML, or not shaped like a plan.
        CyclicDependency: A step references itself or a later step.
    """
    path = Path(path)
    if not path.is_file():
        raise PlanError(f"Plan file not found: {path}", path)

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PlanError(f"Plan file is not valid YAML: {path}: {e}", path) from e

    # An empty file is an empty plan
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PlanError(f"Plan file must contain a mapping with 'steps': {path}", path)

    try:
        plan = DeploymentPlan(**data)
    except ValidationError as e:
        raise PlanError(f"Invalid plan {path}: {e}", path) from e

    validate_steps(plan.steps)
    console.print(f"[green][PLAN] Loaded {len(plan.steps)} steps from {path}[/green]")
    return plan


def validate_steps(steps: Sequence[DeploymentStep]) -> None:
    """
    Check that every reference points at an earlier step.

    Raises:
        CyclicDependency: On duplicate names, self references, forward or
            unknown references, or library links to non-library steps.
    """
    seen: dict[str, DeploymentStep] = {}
    for step in steps:
        _check_unique(step, seen)
        for ref in step.references():
            _check_reference(step, ref, seen, steps)
        _check_library_links(step, seen)
        seen[step.name] = step


def _check_unique(step: DeploymentStep, seen: dict[str, DeploymentStep]) -> None:
    if step.name in seen:
        console.print(f"[red][PLAN] Rejected: duplicate step '{step.name}'[/red]")
        raise CyclicDependency(
            f"Step '{step.name}' is declared more than once",
            step=step.name,
            rule="duplicate_name",
        )


def _check_reference(
    step: DeploymentStep,
    ref: str,
    seen: dict[str, DeploymentStep],
    steps: Sequence[DeploymentStep],
) -> None:
    if ref == step.name:
        console.print(f"[red][PLAN] Rejected: '{step.name}' depends on itself[/red]")
        raise CyclicDependency(
            f"Step '{step.name}' references itself",
            step=step.name,
            rule="self_reference",
        )

    if ref in seen:
        return

    if any(other.name == ref for other in steps):
        console.print(f"[red][PLAN] Rejected: '{step.name}' depends on later step '{ref}'[/red]")
        raise CyclicDependency(
            f"Step '{step.name}' references '{ref}', which is declared after it",
            step=step.name,
            rule="forward_reference",
            details=ref,
        )

    console.print(f"[red][PLAN] Rejected: '{step.name}' depends on unknown step '{ref}'[/red]")
    raise CyclicDependency(
        f"Step '{step.name}' references unknown step '{ref}'",
        step=step.name,
        rule="unknown_reference",
        details=ref,
    )


def _check_library_links(step: DeploymentStep, seen: dict[str, DeploymentStep]) -> None:
    for link in step.library_links:
        if seen[link].kind != StepKind.LIBRARY:
            console.print(f"[red][PLAN] Rejected: '{step.name}' links non-library '{link}'[/red]")
            raise CyclicDependency(
                f"Step '{step.name}' links '{link}', which is not a library",
                step=step.name,
                rule="library_kind",
                details=link,
            )
