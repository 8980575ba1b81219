"""
Compiler diagnostics as reported in the `errors` list of a solc
standard-JSON output document.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..constants import MISSING_SOURCE_PATTERN


@dataclass(frozen=True)
class Diagnostic:
    severity: str
    type: str
    message: str
    formatted_message: str = ""
    error_code: Optional[str] = None
    source_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Diagnostic":
        location = data.get("sourceLocation") or {}
        return cls(
            severity=data.get("severity", "error"),
            type=data.get("type", ""),
            message=data.get("message", ""),
            formatted_message=data.get("formattedMessage", ""),
            error_code=data.get("errorCode"),
            source_file=location.get("file"),
        )

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    @property
    def missing_import(self) -> Optional[str]:
        """Identifier of the source solc could not load, if that is what this reports."""
        if not self.is_error:
            return None
        match = MISSING_SOURCE_PATTERN.match(self.message)
        return match.group("path") if match else None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity,
            "type": self.type,
            "message": self.message,
            "formattedMessage": self.formatted_message,
            "errorCode": self.error_code,
            "sourceFile": self.source_file,
        }


def collect_diagnostics(document: Dict[str, Any]) -> List[Diagnostic]:
    return [Diagnostic.from_dict(entry) for entry in document.get("errors", [])]


def errors_only(diagnostics: List[Diagnostic]) -> List[Diagnostic]:
    return [d for d in diagnostics if d.is_error]
