"""
Contract Template Store and Renderer

The store reads the fixed Solidity template from disk on every request. The
renderer turns that raw text into the source handed to the compiler by
filling `${NAME}` placeholders from an explicit, enumerable set of variables.
Rendering is plain substitution; template text is never executed.

Placeholder syntax:
    ${NAME}      replaced with str(variables["NAME"])
    $${NAME}     renders the literal text "${NAME}"
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..constants import PLACEHOLDER_PATTERN
from ..exceptions import ContentEvaluationError, StorageError
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Template:
    """Raw template text as read from storage."""
    name: str
    text: str


@dataclass(frozen=True)
class ResolvedSource:
    """
    Rendered Solidity source.

    `name` is the template name and doubles as the source-file key in the
    compiler input and output documents.
    """
    name: str
    content: str


class TemplateStore:
    """Reads templates from a fixed base directory."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def path_for(self, name: str) -> Path:
        base = self.base_dir.resolve()
        try:
            path = (base / name).resolve()
        except (OSError, ValueError) as e:
            raise StorageError(f"Invalid template name {name!r}: {e}", details={"template": name}) from e
        if not path.is_relative_to(base):
            raise StorageError(
                f"Template {name!r} is outside the template directory",
                details={"template": name},
            )
        return path

    def read(self, name: str) -> Template:
        """
        Read a template's raw text.

        Raises:
            StorageError: if the file is missing, not a file, or unreadable
        """
        path = self.path_for(name)
        if not path.is_file():
            raise StorageError(
                f"Template {name!r} not found in {self.base_dir}",
                details={"template": name, "path": str(path)},
            )

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(
                f"Template {name!r} could not be read: {e}",
                details={"template": name, "path": str(path)},
            ) from e

        logger.info(f"Read template {name} ({len(text)} chars)")
        return Template(name=name, text=text)


class TemplateRenderer:
    """
    Renders a template by substituting `${NAME}` placeholders.

    Args:
        variables: The complete set of names a template may reference.
    """

    def __init__(self, variables: Optional[Mapping[str, Any]] = None):
        self.variables: Dict[str, Any] = dict(variables or {})

    def placeholders(self, text: str) -> List[str]:
        """Names referenced by unescaped placeholders, in order of first use."""
        names: List[str] = []
        for match in PLACEHOLDER_PATTERN.finditer(text):
            escaped, name = match.group(1), match.group(2)
            if not escaped and name not in names:
                names.append(name)
        return names

    def render(self, template: Template) -> ResolvedSource:
        """
        Raises:
            ContentEvaluationError: if the template references unknown variables
        """
        unknown = [name for name in self.placeholders(template.text) if name not in self.variables]
        if unknown:
            raise ContentEvaluationError(
                f"Template {template.name!r} references undefined variables: {', '.join(unknown)}",
                details={"template": template.name, "undefined": unknown},
            )

        def substitute(match) -> str:
            escaped, name = match.group(1), match.group(2)
            if escaped:
                # Drop one "$" and keep the placeholder text as written
                return match.group(0)[1:]
            return str(self.variables[name])

        content = PLACEHOLDER_PATTERN.sub(substitute, template.text)
        logger.info(f"Rendered template {template.name} with {len(self.placeholders(template.text))} variable(s)")
        return ResolvedSource(name=template.name, content=content)
