# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Pydantic models shared by the Sequencer (steps and results) and the
# Auditor (artifact records and report entries).
# -----------------------------------------------------------------------------

from .models import (
    AddressRef,
    ArtifactRecord,
    AuditEntry,
    DeploymentPlan,
    DeploymentResult,
    DeploymentStatus,
    DeploymentStep,
    StepKind,
)

__all__ = [
    "AddressRef", "ArtifactRecord", "AuditEntry", "DeploymentPlan",
    "DeploymentResult", "DeploymentStatus", "DeploymentStep", "StepKind",
]
