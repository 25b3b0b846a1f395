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
# DOMAIN MODELS - DEPLOYMENT STEPS & ARTIFACTS
# -----------------------------------------------------------------------------
# These Pydantic models describe what gets deployed and what was compiled.
# A DeploymentPlan is an ordered list of DeploymentSteps; the Sequencer
# executes it and produces one DeploymentResult per step.
#
# ArtifactRecord is the slice of a compiled build artifact the Auditor reads.
# Only contractName and deployedBytecode are required; everything else in
# the artifact file is ignored.
# -----------------------------------------------------------------------------

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class StepKind(str, Enum):
    """
    What a deployment step publishes.

    Libraries are linked into dependents' bytecode; contracts receive
    addresses through their constructor arguments.
    """

    CONTRACT = "contract"
    LIBRARY = "library"


class DeploymentStatus(str, Enum):
    """Lifecycle of a single step within one deployment session."""

    PENDING = "pending"
    DEPLOYED = "deployed"
    FAILED = "failed"


class AddressRef(BaseModel):
    """
    Placeholder for the on-chain address of an earlier step.

    Written as `{ref: StepName}` in plan files and replaced with the
    deployed address right before the dependent step runs.
    """

    ref: str = Field(..., min_length=1, description="Name of the step whose address is needed")

    class Config:
        frozen = True


class DeploymentStep(BaseModel):
    """
    One unit of work: publish one artifact with resolved parameters.

    Fields:
    - name: Unique identifier of the step within a session
    - kind: contract or library
    - artifact: Artifact to deploy (defaults to the step name)
    - constructor_args: Literals or AddressRefs, in constructor order
    - library_links: Names of earlier library steps to link before deploying
    """

    name: str = Field(..., min_length=1, description="Unique step identifier")
    kind: StepKind = Field(StepKind.CONTRACT, description="contract or library")
    artifact: str | None = Field(None, description="Artifact name, defaults to the step name")
    constructor_args: list[Any] = Field(default_factory=list)
    library_links: list[str] = Field(default_factory=list)

    class Config:
        str_strip_whitespace = True
        use_enum_values = True

    @field_validator("constructor_args", mode="before")
    @classmethod
    def _parse_refs(cls, value: Any) -> Any:
        """Turn `{ref: Name}` mappings into AddressRef placeholders."""
        if not isinstance(value, list):
            return value
        parsed = []
        for arg in value:
            if isinstance(arg, dict) and set(arg) == {"ref"}:
                parsed.append(AddressRef(ref=arg["ref"]))
            else:
                parsed.append(arg)
        return parsed

    @field_validator("library_links")
    @classmethod
    def _dedupe_links(cls, value: list[str]) -> list[str]:
        # Links are a set; keep declaration order for stable link calls
        return list(dict.fromkeys(value))

    @property
    def artifact_name(self) -> str:
        return self.artifact or self.name

    def references(self) -> list[str]:
        """Every step name this step depends on (args first, then links)."""
        refs = [arg.ref for arg in self.constructor_args if isinstance(arg, AddressRef)]
        return list(dict.fromkeys(refs + self.library_links))


class DeploymentResult(BaseModel):
    """
    Outcome of a single step.

    Created PENDING when the step starts, then moved to DEPLOYED (address
    set) or FAILED (error set). Never reused across sessions.
    """

    name: str
    status: DeploymentStatus = DeploymentStatus.PENDING
    address: str | None = None
    error: str | None = None

    class Config:
        use_enum_values = True

    @property
    def is_deployed(self) -> bool:
        return self.status == DeploymentStatus.DEPLOYED


class DeploymentPlan(BaseModel):
    """An ordered list of steps; the order is the dependency chain."""

    steps: list[DeploymentStep] = Field(default_factory=list)


class ArtifactRecord(BaseModel):
    """
    The two fields of a compiled artifact the Auditor cares about.

    deployedBytecode is hex text, "0x" prefix optional. Unlinked bytecode
    may contain library placeholders instead of hex digits, so only the
    length is checked here.
    """

    contract_name: str = Field(..., alias="contractName", min_length=1)
    deployed_bytecode: str = Field(..., alias="deployedBytecode")

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("deployed_bytecode")
    @classmethod
    def _even_length(cls, value: str) -> str:
        body = value[2:] if value[:2].lower() == "0x" else value
        if len(body) % 2:
            raise ValueError(f"odd-length bytecode ({len(body)} hex chars)")
        return value

    @property
    def size_bytes(self) -> int:
        """Deployed code size: two hex characters per byte."""
        body = self.deployed_bytecode
        if body[:2].lower() == "0x":
            body = body[2:]
        return len(body) // 2


class AuditEntry(BaseModel):
    """One ranked line of the size report."""

    contract_name: str
    size_bytes: int = Field(..., ge=0)
    over_limit: bool = False
