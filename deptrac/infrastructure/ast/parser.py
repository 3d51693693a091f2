"""Python source parser producing file references."""

import ast
from dataclasses import dataclass, field
from typing import Any, Dict, List

from deptrac.infrastructure.exceptions import InfrastructureError
from deptrac.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)


class CouldNotParseFileError(InfrastructureError):
    """Raised when a source file cannot be read or is not valid Python."""

    def __init__(self, filepath: str, reason: str):
        super().__init__(f'Could not parse file "{filepath}": {reason}', {"filepath": filepath})
        self.filepath = filepath
        self.reason = reason


@dataclass
class FileReference:
    """
    Dependencies and declarations found in a single source file.

    Attributes:
        filepath: Absolute path of the parsed file
        imports: Imported module names, in source order
        classes: Top-level class names
        functions: Top-level function names
    """

    filepath: str
    imports: List[str] = field(default_factory=list)
    classes: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filepath": self.filepath,
            "imports": list(self.imports),
            "classes": list(self.classes),
            "functions": list(self.functions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileReference":
        return cls(
            filepath=data["filepath"],
            imports=list(data.get("imports", [])),
            classes=list(data.get("classes", [])),
            functions=list(data.get("functions", [])),
        )


class PythonAstParser:
    """Parses files with the ``ast`` module, consulting the reference cache first."""

    def __init__(self, cache):
        self.cache = cache

    def parse_file(self, filepath: str) -> FileReference:
        """
        Build the ``FileReference`` of a file.

        Raises:
            CouldNotParseFileError: If the file cannot be read or parsed
        """
        cached = self.cache.get(filepath)
        if cached is not None:
            logger.debug(f"Cache hit for {filepath}")
            return cached

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                source = f.read()
            tree = ast.parse(source, filename=filepath)
        except (OSError, SyntaxError, ValueError) as e:
            raise CouldNotParseFileError(filepath, str(e)) from e

        reference = self._collect(filepath, tree)
        self.cache.set(reference)
        return reference

    @staticmethod
    def _collect(filepath: str, tree: ast.Module) -> FileReference:
        reference = FileReference(filepath)

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                reference.imports.extend(alias.name for alias in node.names)
            elif isinstance(node, ast.ImportFrom):
                # relative imports keep their leading dots
                module = "." * node.level + (node.module or "")
                reference.imports.append(module)

        for node in tree.body:
            if isinstance(node, ast.ClassDef):
                reference.classes.append(node.name)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                reference.functions.append(node.name)

        return reference
