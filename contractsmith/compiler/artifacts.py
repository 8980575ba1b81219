"""
Artifact Extraction

Picks one contract out of the compiler's multi-contract output document and
formats its ABI and creation bytecode as the response payload.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from eth_typing import HexStr
from eth_utils import is_hex

from ..constants import LIBRARY_PLACEHOLDER_MARKER
from ..exceptions import ArtifactNotFoundError
from ..logger import get_logger

logger = get_logger(__name__)


def format_bytecode(bytecode_object: str) -> HexStr:
    """Compiler bytecode object with "0x" prepended, otherwise untouched."""
    return HexStr("0x" + bytecode_object)


@dataclass(frozen=True)
class ContractArtifact:
    """Deployable artifacts of a single contract."""

    abi: List[Dict[str, Any]]
    bytecode: str

    def to_dict(self) -> dict:
        return {
            "abi": self.abi,
            "bytecode": self.bytecode,
        }


class ArtifactExtractor:
    """Locates `contracts[source][contract]` in a compiler output document."""

    def extract(self, document: Dict[str, Any], source_key: str, contract_name: str) -> ContractArtifact:
        """
        Raises:
            ArtifactNotFoundError: if the source or contract is absent, or the
                contract carries no ABI/bytecode output
        """
        contracts = document.get("contracts") or {}
        by_name = contracts.get(source_key)
        if by_name is None:
            raise ArtifactNotFoundError(
                f"No contracts were produced for source {source_key!r}",
                details={"source": source_key, "contract": contract_name, "available": []},
            )

        compiled = by_name.get(contract_name)
        if compiled is None:
            raise ArtifactNotFoundError(
                f"Contract {contract_name!r} not found in {source_key!r}",
                details={"source": source_key, "contract": contract_name, "available": sorted(by_name)},
            )

        try:
            abi = compiled["abi"]
            bytecode_object = compiled["evm"]["bytecode"]["object"]
        except (KeyError, TypeError) as e:
            raise ArtifactNotFoundError(
                f"Contract {contract_name!r} has no ABI/bytecode output (missing {e})",
                details={"source": source_key, "contract": contract_name, "available": sorted(by_name)},
            ) from e

        if LIBRARY_PLACEHOLDER_MARKER in bytecode_object:
            logger.warning(f"{contract_name} has unlinked libraries (placeholders present)")
        elif bytecode_object and not is_hex(bytecode_object):
            logger.warning(f"{contract_name} bytecode object is not a hex string")

        bytecode = format_bytecode(bytecode_object)
        logger.info(f"Extracted {contract_name} from {source_key}: {len(abi)} ABI entries, {len(bytecode_object) // 2} bytes")
        return ContractArtifact(abi=abi, bytecode=bytecode)
