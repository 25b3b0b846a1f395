"""
Pytest configuration and fixtures for chainwright tests.
"""

import json
import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep the developer's .env out of test runs
os.environ.pop("CHAINWRIGHT_SIZE_THRESHOLD", None)
os.environ.pop("CHAINWRIGHT_DEPLOY_TIMEOUT", None)

from src.domain.models import AddressRef, DeploymentStep, StepKind
from src.infra.simulated import SimulatedBackend


def _write_artifact(directory: Path, name: str, hex_chars: int, prefix: str = "0x") -> Path:
    """Write a minimal build artifact with `hex_chars` characters of bytecode."""
    path = directory / f"{name}.json"
    path.write_text(json.dumps({
        "contractName": name,
        "deployedBytecode": prefix + "a" * hex_chars,
        "abi": [],
    }))
    return path


@pytest.fixture
def write_artifact():
    """Factory writing minimal artifacts: write_artifact(dir, name, hex_chars)."""
    return _write_artifact


@pytest.fixture
def backend():
    """Fresh simulated chain."""
    return SimulatedBackend()


@pytest.fixture
def cryptomons_steps():
    """The canonical chain: VMC <- RootChain <- CryptoMons."""
    return [
        DeploymentStep(name="ValidatorManagerContract"),
        DeploymentStep(name="RootChain", constructor_args=[AddressRef(ref="ValidatorManagerContract")]),
        DeploymentStep(name="CryptoMons", constructor_args=[AddressRef(ref="RootChain")]),
    ]


@pytest.fixture
def library_steps():
    """A library linked into a contract that also takes a literal argument."""
    return [
        DeploymentStep(name="SafeMath", kind=StepKind.LIBRARY),
        DeploymentStep(name="Token", library_links=["SafeMath"], constructor_args=["MON", 18]),
        DeploymentStep(
            name="Market",
            library_links=["SafeMath"],
            constructor_args=[AddressRef(ref="Token"), 100],
        ),
    ]


@pytest.fixture
def artifact_dir(tmp_path):
    """Build directory with artifacts of 40, 4000 and 48000 hex chars."""
    directory = tmp_path / "contracts"
    directory.mkdir()
    _write_artifact(directory, "Small", 40)
    _write_artifact(directory, "Medium", 4000, prefix="")
    _write_artifact(directory, "Large", 48000)
    return directory
