"""
Contractsmith Exceptions

Custom exception classes for the compilation pipeline. Every pipeline failure
carries a stable `kind` tag and the HTTP status the transports report it with.
"""

from typing import Any, Dict, Optional


class ContractsmithError(Exception):
    """Base exception for Contractsmith."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "message": self.message,
            "details": self.details,
        }


class StorageError(ContractsmithError):
    """Template or dependency file is missing or unreadable."""
    kind = "storage_error"
    status_code = 503


class ContentEvaluationError(ContractsmithError):
    """Template rendering failed."""
    kind = "content_evaluation_error"
    status_code = 500


class ImportResolutionError(ContractsmithError):
    """
    A single import could not be supplied to the compiler.

    Never crosses the compiler boundary; the resolver reports it as
    {"error": "File not found"}.
    """
    kind = "import_resolution_error"
    status_code = 404


class CompilerError(ContractsmithError):
    """The compiler could not be run or returned an undecodable document."""
    kind = "compiler_error"
    status_code = 502


class CompilerDiagnosticError(ContractsmithError):
    """The compiler reported errors in its diagnostics collection."""
    kind = "compiler_diagnostic_error"
    status_code = 422


class ArtifactNotFoundError(ContractsmithError):
    """The expected source/contract pair is absent from the compiler output."""
    kind = "artifact_not_found"
    status_code = 404


class ConfigurationError(ContractsmithError):
    """Configuration error."""
    kind = "configuration_error"
    status_code = 500
