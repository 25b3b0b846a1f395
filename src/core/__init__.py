# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The business logic of chainwright:
# - Plan: YAML loading and reference validation
# - Sequencer: Ordered deployment with address threading
# - Linker: Library placeholder replacement
# - Registry: JSON record of each session
# - Auditor: Artifact size ranking
# -----------------------------------------------------------------------------

from .auditor import audit_artifacts, format_report, load_artifact, pad
from .errors import (
    ChainwrightError,
    CyclicDependency,
    DeploymentFailed,
    DirectoryUnreadable,
    LinkError,
    MalformedArtifact,
    PlanError,
    UnresolvedDependency,
)
from .linker import link_bytecode
from .plan import load_plan, validate_steps
from .registry import load_deployment, save_deployment
from .sequencer import DeploymentBackend, Sequencer, run_deployment

__all__ = [
    "audit_artifacts", "format_report", "load_artifact", "pad",
    "ChainwrightError", "CyclicDependency", "DeploymentFailed", "DirectoryUnreadable",
    "LinkError", "MalformedArtifact", "PlanError", "UnresolvedDependency",
    "link_bytecode",
    "load_plan", "validate_steps",
    "load_deployment", "save_deployment",
    "DeploymentBackend", "Sequencer", "run_deployment",
]
