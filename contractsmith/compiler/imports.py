"""
Import Resolution

The compiler asks for every source it cannot find among the sources of the
input document. An ImportResolver answers those requests one identifier at a
time, synchronously, and must never raise: a failure is reported back to the
compiler as {"error": "File not found"} and the compiler decides what it means.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..constants import DEFAULT_IMPORT_PREFIXES, IMPORT_NOT_FOUND
from ..exceptions import ImportResolutionError
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one resolution: exactly one of contents/error is set."""

    contents: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.contents is not None

    def to_dict(self) -> dict:
        if self.ok:
            return {"contents": self.contents}
        return {"error": self.error}


class ImportResolver(ABC):
    """Resolves import identifiers requested by the compiler."""

    @abstractmethod
    def resolve(self, identifier: str) -> ImportResult:
        """Return the identifier's source text, or an error result."""


class NamespaceImportResolver(ImportResolver):
    """
    Serves imports under trusted package namespaces from a dependency root.

    `@openzeppelin/contracts/token/ERC721/ERC721.sol` is read from
    `<dependency_root>/@openzeppelin/contracts/token/ERC721/ERC721.sol` when
    "@openzeppelin" is a recognised prefix. Anything else is refused.
    """

    def __init__(self, dependency_root: Path, prefixes: Iterable[str] = DEFAULT_IMPORT_PREFIXES):
        self.dependency_root = Path(dependency_root)
        self.prefixes: Tuple[str, ...] = tuple(prefixes)
        self.attempts: List[Tuple[str, bool]] = []

    def is_recognised(self, identifier: str) -> bool:
        return any(identifier.startswith(prefix) for prefix in self.prefixes)

    def resolve(self, identifier: str) -> ImportResult:
        try:
            contents = self._read(identifier)
        except ImportResolutionError as e:
            logger.warning(f"import {identifier} not found: {e.message}")
            self.attempts.append((identifier, False))
            return ImportResult(error=IMPORT_NOT_FOUND)

        logger.info(f"reading import {identifier}: resolved ({len(contents)} chars)")
        self.attempts.append((identifier, True))
        return ImportResult(contents=contents)

    def _read(self, identifier: str) -> str:
        if not self.is_recognised(identifier):
            raise ImportResolutionError("namespace not recognised", details={"import": identifier})

        try:
            root = self.dependency_root.resolve()
            path = (root / identifier).resolve()
            if not path.is_relative_to(root):
                raise ImportResolutionError("path escapes dependency root", details={"import": identifier})
            return path.read_text(encoding="utf-8")
        except (OSError, ValueError) as e:
            # ValueError covers embedded NULs and UnicodeDecodeError
            raise ImportResolutionError(str(e), details={"import": identifier}) from e
