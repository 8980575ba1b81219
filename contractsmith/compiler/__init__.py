"""
Solidity Compilation Pipeline

Renders the contract template, compiles it with solc, resolving imports
from trusted package namespaces, and extracts one contract's ABI and bytecode.
"""

from .templates import Template, ResolvedSource, TemplateStore, TemplateRenderer
from .imports import ImportResolver, ImportResult, NamespaceImportResolver
from .diagnostics import Diagnostic, collect_diagnostics
from .invoker import CompilationInvoker, SolcBackend, SolcxBackend, build_input_document
from .artifacts import ArtifactExtractor, ContractArtifact, format_bytecode
from .pipeline import CompilationPipeline, PipelineResult

__all__ = [
    'Template',
    'ResolvedSource',
    'TemplateStore',
    'TemplateRenderer',
    'ImportResolver',
    'ImportResult',
    'NamespaceImportResolver',
    'Diagnostic',
    'collect_diagnostics',
    'CompilationInvoker',
    'SolcBackend',
    'SolcxBackend',
    'build_input_document',
    'ArtifactExtractor',
    'ContractArtifact',
    'format_bytecode',
    'CompilationPipeline',
    'PipelineResult',
]
