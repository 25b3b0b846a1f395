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
# WEB3 BACKEND - JSON-RPC DEPLOYMENT
# -----------------------------------------------------------------------------
# Responsibility: Link and deploy compiled artifacts over JSON-RPC.
#
# - Reads abi + bytecode from <build_dir>/<Artifact>.json
# - Keeps linked bytecode per artifact until it is deployed
# - Signs locally with PRIVATE_KEY when set, otherwise sends from the
#   node's first unlocked account (ganache / anvil / hardhat node)
#
# web3.py is synchronous; every RPC round trip runs in a worker thread so
# the event loop stays free while a transaction is being mined.
# -----------------------------------------------------------------------------

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from rich.console import Console
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from src.core.errors import LinkError
from src.core.linker import link_bytecode, unlinked_libraries

console = Console()

# Configuration
RPC_URL = os.getenv("RPC_URL", "http://localhost:8545")
BUILD_DIR = Path(os.getenv("CHAINWRIGHT_BUILD_DIR", "build/contracts"))
RECEIPT_TIMEOUT_SECONDS = 300


class Web3Backend:
    """
    DeploymentBackend backed by a web3.py connection.

    Requirements:
    - Artifacts in build_dir must carry `abi` and `bytecode`
    - RPC endpoint reachable at rpc_url
    """

    def __init__(
        self,
        build_dir: Path | str = BUILD_DIR,
        rpc_url: str = RPC_URL,
        private_key: str | None = None,
        w3: Web3 | None = None,
    ) -> None:
        self._build_dir = Path(build_dir)
        self._private_key = private_key if private_key is not None else os.getenv("PRIVATE_KEY")
        self._bytecode: dict[str, str] = {}
        self._abi: dict[str, list] = {}

        if w3 is None:
            w3 = Web3(Web3.HTTPProvider(rpc_url))
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            if not w3.is_connected():
                raise ConnectionError(f"Could not connect to RPC URL: {rpc_url}")
        self.w3 = w3
        self.rpc_url = rpc_url

        if self._private_key:
            self._account = self.w3.eth.account.from_key(self._private_key)
            self.sender = self._account.address
        else:
            self._account = None
            accounts = self.w3.eth.accounts
            if not accounts:
                raise ValueError(f"No unlocked accounts on {rpc_url} and PRIVATE_KEY is not set")
            self.sender = accounts[0]
        console.print(f"[green][WEB3] Connected to {rpc_url} as {self.sender}[/green]")

    def _load(self, artifact_name: str) -> None:
        """Read abi and unlinked bytecode for an artifact, once."""
        if artifact_name in self._bytecode:
            return
        path = self._build_dir / f"{artifact_name}.json"
        with open(path) as f:
            data = json.load(f)
        self._abi[artifact_name] = data["abi"]
        self._bytecode[artifact_name] = data["bytecode"]

    async def link(self, library_name: str, library_address: str, into_artifact: str) -> None:
        await asyncio.to_thread(self._load, into_artifact)
        self._bytecode[into_artifact] = link_bytecode(
            self._bytecode[into_artifact], library_name, library_address
        )
        console.print(f"[cyan][WEB3] Linked {library_name} ({library_address}) into {into_artifact}[/cyan]")

    async def deploy(
        self, artifact_name: str, constructor_args: list[Any], libraries: dict[str, str]
    ) -> str:
        await asyncio.to_thread(self._load, artifact_name)
        bytecode = self._bytecode[artifact_name]

        missing = unlinked_libraries(bytecode)
        if missing:
            raise LinkError(
                f"{artifact_name} still has unlinked libraries: {', '.join(missing)}", missing[0]
            )

        address = await asyncio.to_thread(self._send_deploy, artifact_name, bytecode, constructor_args)
        # Linked bytecode belongs to this deployment only
        self._bytecode.pop(artifact_name, None)
        return address

    def _send_deploy(self, artifact_name: str, bytecode: str, constructor_args: list[Any]) -> str:
        """Build, sign, send and wait for a contract creation transaction."""
        contract = self.w3.eth.contract(abi=self._abi[artifact_name], bytecode=bytecode)
        constructor = contract.constructor(*constructor_args)

        if self._account is None:
            tx_hash = constructor.transact({"from": self.sender})
        else:
            tx = constructor.build_transaction({
                "from": self.sender,
                "nonce": self.w3.eth.get_transaction_count(self.sender),
                "gasPrice": self.w3.eth.gas_price,
            })
            signed_tx = self.w3.eth.account.sign_transaction(tx, self._private_key)
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

        console.print(f"[cyan][WEB3] {artifact_name} tx sent: {tx_hash.hex()}[/cyan]")
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT_SECONDS)

        if receipt["status"] != 1:
            raise RuntimeError(f"{artifact_name} deployment reverted (tx {tx_hash.hex()})")
        return receipt["contractAddress"]
