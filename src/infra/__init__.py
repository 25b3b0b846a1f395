# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Deployment backends:
# - SimulatedBackend: In-memory chain for dry runs and tests
# - Web3Backend: JSON-RPC deployment (imported from .web3_client on demand)
# -----------------------------------------------------------------------------

from .simulated import SimulatedBackend

__all__ = ["SimulatedBackend"]
