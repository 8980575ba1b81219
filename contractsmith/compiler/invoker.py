"""
Compilation Invoker

Builds the solc standard-JSON input document for a rendered template and runs
the compiler over it, answering the compiler's import requests through an
ImportResolver.

The solc binary has no in-process import callback, so the invoker plays that
role itself: solc reports every source it could not load as
`Source "<id>" not found: ...`; each new identifier is handed to the resolver
once, resolved contents are added to the input document, and the compiler is
run again until it asks for nothing new.
"""

import copy
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from solcx import install_solc
from solcx.exceptions import SolcError, SolcNotInstalled
from solcx.install import get_executable
from solcx.wrapper import solc_wrapper

from ..constants import OUTPUT_SELECTION_ALL, SOURCE_LANGUAGE
from ..exceptions import CompilerError
from ..logger import get_logger
from .diagnostics import Diagnostic
from .imports import ImportResolver, ImportResult
from .templates import ResolvedSource

logger = get_logger(__name__)


def build_input_document(source: ResolvedSource, settings: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Compiler input for a single rendered source.

    Every output is selected for every file and contract; extra settings
    (optimizer, evmVersion) are merged alongside.
    """
    merged = dict(settings or {})
    merged["outputSelection"] = copy.deepcopy(OUTPUT_SELECTION_ALL)
    return {
        "language": SOURCE_LANGUAGE,
        "sources": {
            source.name: {"content": source.content},
        },
        "settings": merged,
    }


def missing_imports(document: Dict[str, Any]) -> List[str]:
    """Identifiers solc reported as not found, in report order, without repeats."""
    found: List[str] = []
    for entry in document.get("errors", []):
        identifier = Diagnostic.from_dict(entry).missing_import
        if identifier and identifier not in found:
            found.append(identifier)
    return found


def rewrite_import_diagnostics(document: Dict[str, Any], attempts: Dict[str, ImportResult]) -> None:
    """Replace solc's own reason for refused imports with the resolver's error text."""
    for entry in document.get("errors", []):
        diagnostic = Diagnostic.from_dict(entry)
        identifier = diagnostic.missing_import
        result = attempts.get(identifier) if identifier else None
        if result is None or result.ok:
            continue
        reason = diagnostic.message.split(" not found: ", 1)[1]
        entry["message"] = f'Source "{identifier}" not found: {result.error}'
        if "formattedMessage" in entry:
            entry["formattedMessage"] = entry["formattedMessage"].replace(reason, result.error, 1)


class SolcBackend(ABC):
    """The external compiler: serialized input document in, serialized output out."""

    @abstractmethod
    def compile_json(self, input_json: str) -> str:
        ...


class SolcxBackend(SolcBackend):
    """
    Runs a local solc binary in --standard-json mode through py-solc-x.

    Args:
        version: solc version to use when no explicit binary is given.
        solc_binary: Path to a specific solc executable.
        install_missing: Download `version` if it is not installed yet.
    """

    def __init__(self, version: str = "", solc_binary: str = "", install_missing: bool = False):
        self.version = version
        self.solc_binary = solc_binary
        self.install_missing = install_missing
        self._executable: Optional[Path] = None

    def executable(self) -> Path:
        if self._executable is not None:
            return self._executable

        if self.solc_binary:
            self._executable = Path(self.solc_binary)
            return self._executable

        try:
            self._executable = get_executable(self.version)
        except SolcNotInstalled as e:
            if not self.install_missing:
                raise CompilerError(
                    f"solc {self.version} is not installed",
                    details={"solc_version": self.version},
                ) from e
            logger.info(f"Installing solc {self.version}...")
            try:
                install_solc(self.version)
                self._executable = get_executable(self.version)
            except (SolcError, SolcNotInstalled, OSError) as install_error:
                raise CompilerError(
                    f"solc {self.version} could not be installed: {install_error}",
                    details={"solc_version": self.version},
                ) from install_error
        return self._executable

    def compile_json(self, input_json: str) -> str:
        binary = self.executable()
        try:
            stdout, _stderr, _command, _proc = solc_wrapper(
                solc_binary=binary,
                stdin=input_json,
                standard_json=True,
            )
        except (SolcError, OSError) as e:
            raise CompilerError(f"solc failed to run: {e}", details={"solc_binary": str(binary)}) from e
        return stdout


class CompilationInvoker:
    """
    Compiles a rendered source with import resolution.

    Args:
        backend: The compiler to run.
        settings: Extra compiler settings (optimizer, evmVersion).
    """

    def __init__(self, backend: SolcBackend, settings: Optional[Dict[str, Any]] = None):
        self.backend = backend
        self.settings = dict(settings or {})

    def compile(self, source: ResolvedSource, resolver: ImportResolver) -> Dict[str, Any]:
        """
        Run the compiler until every import it requests has been answered.

        Returns:
            The parsed compiler output document.

        Raises:
            CompilerError: if the compiler cannot run or its output is not a JSON object
        """
        document = build_input_document(source, self.settings)
        attempts: Dict[str, ImportResult] = {}
        run = 0

        while True:
            run += 1
            output = self._run(document, run)

            requested = [i for i in missing_imports(output) if i not in attempts]
            if not requested:
                break

            supplied = 0
            for identifier in requested:
                result = resolver.resolve(identifier)
                attempts[identifier] = result
                if result.ok:
                    document["sources"][identifier] = {"content": result.contents}
                    supplied += 1

            if not supplied:
                break

        rewrite_import_diagnostics(output, attempts)
        logger.info(
            f"solc compiler done after {run} run(s): "
            f"{len(document['sources']) - 1} import(s) supplied, "
            f"{sum(1 for r in attempts.values() if not r.ok)} refused"
        )
        return output

    def _run(self, document: Dict[str, Any], run: int) -> Dict[str, Any]:
        logger.info(f"about to launch solc compiler (run {run}, {len(document['sources'])} source(s))")
        raw = self.backend.compile_json(json.dumps(document))

        try:
            output = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise CompilerError(f"Compiler output is not valid JSON: {e}") from e
        if not isinstance(output, dict):
            raise CompilerError("Compiler output is not a JSON object")

        logger.debug(f"solc output: {output}")
        return output
