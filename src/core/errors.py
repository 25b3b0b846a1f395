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
# ERROR TAXONOMY
# -----------------------------------------------------------------------------
# Every failure carries the step, artifact or path it concerns so the caller
# can tell what broke without re-reading logs. Deployment errors also carry
# the results gathered before the failure: on-chain deployments cannot be
# undone, so the caller needs to know what is already live.
# -----------------------------------------------------------------------------

from pathlib import Path

from src.domain.models import DeploymentResult


class ChainwrightError(Exception):
    """Base class for every error raised by chainwright."""

    pass


class PlanError(ChainwrightError):
    """Raised when a plan file is missing, unreadable or not a valid plan."""

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(message)
        self.path = Path(path)


class CyclicDependency(ChainwrightError):
    """
    Raised at validation time, before any deployment is attempted.

    rule names the check that failed: self_reference, forward_reference,
    unknown_reference, duplicate_name or library_kind.
    """

    def __init__(self, message: str, step: str, rule: str, details: str = "") -> None:
        super().__init__(message)
        self.step = step
        self.rule = rule
        self.details = details


class UnresolvedDependency(ChainwrightError):
    """Raised when a step needs the address of a step that is not deployed."""

    def __init__(
        self,
        message: str,
        step: str,
        reference: str,
        results: dict[str, DeploymentResult] | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.reference = reference
        self.results = results or {}


class DeploymentFailed(ChainwrightError):
    """Raised when the backend rejects a deploy or link call (or it times out)."""

    def __init__(
        self,
        message: str,
        step: str,
        results: dict[str, DeploymentResult] | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.results = results or {}


class LinkError(ChainwrightError):
    """Raised when a library placeholder is not present in the bytecode."""

    def __init__(self, message: str, library: str) -> None:
        super().__init__(message)
        self.library = library


class DirectoryUnreadable(ChainwrightError):
    """Raised when the artifact directory is missing or not a directory."""

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(message)
        self.path = Path(path)


class MalformedArtifact(ChainwrightError):
    """Raised when an artifact file cannot be parsed or lacks required fields."""

    def __init__(self, message: str, path: Path | str, field: str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path)
        self.field = field
