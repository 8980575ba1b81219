"""
Contract Compilation Pipeline

    template read → render → compile (+ import resolution) → diagnostics → extract

run() never lets a pipeline error escape: every ContractsmithError raised by a
stage comes back as a tagged failure result for the transport to map onto a
status code.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from ..config import AppConfig
from ..exceptions import CompilerDiagnosticError, ContractsmithError
from ..logger import get_logger
from .artifacts import ArtifactExtractor, ContractArtifact
from .diagnostics import collect_diagnostics, errors_only
from .imports import ImportResolver, NamespaceImportResolver
from .invoker import CompilationInvoker, SolcxBackend
from .templates import TemplateRenderer, TemplateStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Either an artifact or a tagged error, never both."""

    artifact: Optional[ContractArtifact] = None
    error: Optional[ContractsmithError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.ok else self.error.status_code

    def to_body(self) -> dict:
        if self.ok:
            return self.artifact.to_dict()
        return {"ok": False, "error": self.error.to_dict()}


class CompilationPipeline:
    """
    Compiles one fixed template and extracts one fixed contract.

    Args:
        store: Template storage.
        renderer: Template renderer holding the allowed variables.
        invoker: Compiler invoker.
        resolver_factory: Builds a fresh ImportResolver per run.
        template_name: Template file name; also the compiler source key.
        contract_name: Contract to extract from the compiled template.
        extractor: Artifact extractor.
    """

    def __init__(
        self,
        store: TemplateStore,
        renderer: TemplateRenderer,
        invoker: CompilationInvoker,
        resolver_factory: Callable[[], ImportResolver],
        template_name: str,
        contract_name: str,
        extractor: Optional[ArtifactExtractor] = None,
    ):
        self.store = store
        self.renderer = renderer
        self.invoker = invoker
        self.resolver_factory = resolver_factory
        self.template_name = template_name
        self.contract_name = contract_name
        self.extractor = extractor or ArtifactExtractor()

    @classmethod
    def from_config(cls, config: AppConfig) -> "CompilationPipeline":
        """Default wiring: on-disk template and dependencies, solc via py-solc-x."""
        dependency_path = config.dependency_path
        prefixes = tuple(config.imports.prefixes)

        def resolver_factory() -> ImportResolver:
            return NamespaceImportResolver(dependency_path, prefixes)

        backend = SolcxBackend(
            version=config.compiler.solc_version,
            solc_binary=config.compiler.solc_binary,
            install_missing=config.compiler.install_missing,
        )
        return cls(
            store=TemplateStore(config.template.templates_path),
            renderer=TemplateRenderer(config.template.variables),
            invoker=CompilationInvoker(backend, config.compiler.settings()),
            resolver_factory=resolver_factory,
            template_name=config.template.name,
            contract_name=config.template.contract,
        )

    def compile(self) -> ContractArtifact:
        """
        Run every stage, raising the first pipeline error.

        Raises:
            ContractsmithError: any subclass, from whichever stage failed
        """
        template = self.store.read(self.template_name)
        source = self.renderer.render(template)
        output = self.invoker.compile(source, self.resolver_factory())

        diagnostics = collect_diagnostics(output)
        for warning in (d for d in diagnostics if not d.is_error):
            logger.warning(f"solc {warning.type}: {warning.message}")

        errors = errors_only(diagnostics)
        if errors:
            raise CompilerDiagnosticError(
                f"Compilation of {source.name} failed with {len(errors)} error(s): {errors[0].message}",
                details={"diagnostics": [d.to_dict() for d in errors]},
            )

        return self.extractor.extract(output, source.name, self.contract_name)

    def run(self) -> PipelineResult:
        try:
            artifact = self.compile()
        except ContractsmithError as e:
            logger.error(f"Compilation of {self.contract_name} failed [{e.kind}]: {e.message}")
            return PipelineResult(error=e)

        logger.info(f"Compilation of {self.contract_name} succeeded")
        return PipelineResult(artifact=artifact)
