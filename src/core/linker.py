# -----------------------------------------------------------------------------
# THE LINKER - LIBRARY PLACEHOLDERS
# -----------------------------------------------------------------------------
# Responsibility: Replace library placeholders in unlinked bytecode with the
# library's deployed address.
#
# Two placeholder shapes exist in compiled artifacts:
# - Legacy (Truffle / solc < 0.5): "__" + library name, right-padded with
#   underscores to 40 characters
# - solc >= 0.5: "__$" + first 34 hex chars of keccak256(fully qualified
#   name) + "$__", also 40 characters
# -----------------------------------------------------------------------------

import re

from eth_utils import keccak

from src.core.errors import LinkError

PLACEHOLDER_LENGTH = 40
ADDRESS_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")


def legacy_placeholder(library_name: str) -> str:
    """Placeholder written by older compilers: the name padded with underscores."""
    return f"__{library_name}".ljust(PLACEHOLDER_LENGTH, "_")[:PLACEHOLDER_LENGTH]


def hashed_placeholder(qualified_name: str) -> str:
    """Placeholder written by solc >= 0.5, e.g. for 'contracts/Math.sol:Math'."""
    digest = keccak(text=qualified_name).hex()
    if digest.startswith("0x"):
        digest = digest[2:]
    return f"__${digest[:34]}$__"


def link_bytecode(bytecode: str, library_name: str, address: str) -> str:
    """
    Write a library address into every placeholder for that library.

    library_name may be a bare name ("Math") or a fully qualified one
    ("contracts/Math.sol:Math"); both placeholder shapes are tried.

    Raises:
        ValueError: address is not 20 bytes of hex.
        LinkError: the bytecode has no placeholder for library_name.
    """
    if not ADDRESS_PATTERN.match(address):
        raise ValueError(f"Not a 20-byte hex address: {address!r}")
    plain = address[2:] if address.startswith("0x") else address
    plain = plain.lower()

    short_name = library_name.rsplit(":", 1)[-1]
    placeholders = {legacy_placeholder(short_name), hashed_placeholder(library_name)}

    linked = bytecode
    for placeholder in placeholders:
        linked = linked.replace(placeholder, plain)

    if linked == bytecode:
        raise LinkError(f"No placeholder for library '{library_name}' in bytecode", library_name)
    return linked


def unlinked_libraries(bytecode: str) -> list[str]:
    """
    Placeholders still present, in order of first appearance.

    Legacy placeholders yield the library name; hashed ones yield the
    "$...$" hash since the name cannot be recovered from it.
    """
    # "__" never occurs in hex, so every match starts a 40-char placeholder
    found = [m.group(1).rstrip("_") for m in re.finditer(r"__(.{38})", bytecode)]
    return list(dict.fromkeys(name for name in found if name))
