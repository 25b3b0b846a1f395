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
# THE AUDITOR - ARTIFACT SIZES
# -----------------------------------------------------------------------------
# Responsibility: Rank compiled artifacts by deployed code size and flag the
# ones above a size ceiling.
#
# The ceiling is always supplied by the caller. Chains differ (24,576 bytes
# on Ethereum mainnet since EIP-170, other values elsewhere), so no limit is
# built in here.
#
# Artifacts are read as JSON data only; nothing in the build directory is
# ever imported or executed.
# -----------------------------------------------------------------------------

import asyncio
import json
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from src.core.errors import DirectoryUnreadable, MalformedArtifact
from src.domain.models import ArtifactRecord, AuditEntry

console = Console(stderr=True)

# Report layout (name column width and filler)
REPORT_WIDTH = 25
REPORT_FILL = "-"
OVER_LIMIT_MARKER = "^" + "-" * (REPORT_WIDTH + 4) + "^"


def load_artifact(path: Path | str) -> ArtifactRecord:
    """
    Parse one artifact file.

    Raises:
        MalformedArtifact: Unreadable, not JSON, or missing/invalid
            contractName / deployedBytecode.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedArtifact(f"Cannot read artifact {path.name}: {e}", path) from e

    if not isinstance(data, dict):
        raise MalformedArtifact(f"Artifact {path.name} is not a JSON object", path)

    try:
        return ArtifactRecord(**data)
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error.get("loc") else None
        raise MalformedArtifact(
            f"Artifact {path.name} has missing or invalid '{field}': {error['msg']}",
            path,
            field=field,
        ) from e


async def _load(path: Path, strict: bool) -> ArtifactRecord | None:
    try:
        return await asyncio.to_thread(load_artifact, path)
    except MalformedArtifact as e:
        if strict:
            raise
        console.print(f"[yellow][AUDITOR] Skipping {path.name}: {escape(str(e))}[/yellow]")
        return None


async def audit_artifacts(
    directory: Path | str, threshold_bytes: int, strict: bool = True
) -> list[AuditEntry]:
    """
    Rank every artifact in `directory` by deployed size, largest first.

    Args:
        directory: Build output folder holding one *.json file per artifact.
        threshold_bytes: Sizes strictly above this are flagged over_limit.
        strict: Abort on the first malformed artifact (True) or skip it
            with a warning (False).

    Returns:
        AuditEntry list sorted by size descending, then name ascending.
        An empty directory gives an empty list.

    Raises:
        DirectoryUnreadable: The path is missing or not a directory.
        MalformedArtifact: strict is True and an artifact is malformed.
    """
    if threshold_bytes < 0:
        raise ValueError(f"threshold_bytes must be >= 0, got {threshold_bytes}")

    directory = Path(directory)
    if not directory.is_dir():
        raise DirectoryUnreadable(f"Not a readable directory: {directory}", directory)

    try:
        paths = sorted(p for p in directory.iterdir() if p.suffix == ".json" and p.is_file())
    except OSError as e:
        raise DirectoryUnreadable(f"Cannot list {directory}: {e}", directory) from e

    console.print(f"[cyan][AUDITOR] Loading {len(paths)} artifacts from {directory}[/cyan]")

    # Files are independent; only the sort needs the full set
    loaded = await asyncio.gather(*(_load(p, strict) for p in paths))
    records = [r for r in loaded if r is not None]

    entries = [
        AuditEntry(
            contract_name=r.contract_name,
            size_bytes=r.size_bytes,
            over_limit=r.size_bytes > threshold_bytes,
        )
        for r in records
    ]
    entries.sort(key=lambda e: (-e.size_bytes, e.contract_name))

    flagged = sum(e.over_limit for e in entries)
    if flagged:
        console.print(f"[red][AUDITOR] {flagged} artifacts exceed {threshold_bytes} bytes[/red]")
    return entries


def pad(value: str, width: int, fill: str = " ") -> str:
    """
    Pad `value` to abs(width) characters with the first char of `fill`.

    Positive width pads on the right, negative on the left. Values already
    at least that long come back unchanged (never truncated).
    """
    char = (fill or " ")[0]
    size = abs(width)
    if len(value) >= size:
        return value
    return value.rjust(size, char) if width < 0 else value.ljust(size, char)


def format_report(
    entries: list[AuditEntry], width: int = REPORT_WIDTH, fill: str = REPORT_FILL
) -> list[str]:
    """One `name<padding>size` line per artifact, plus a marker under each over-limit one."""
    lines = []
    for entry in entries:
        lines.append(f"{pad(entry.contract_name, width, fill)}{entry.size_bytes}")
        if entry.over_limit:
            lines.append(OVER_LIMIT_MARKER)
    return lines
