"""Events dispatched around AST map creation."""

from dataclasses import dataclass, field
from typing import Dict, List

from deptrac.infrastructure.ast.parser import FileReference


@dataclass
class PreCreateAstMapEvent:
    files: List[str] = field(default_factory=list)


@dataclass
class PostCreateAstMapEvent:
    references: Dict[str, FileReference] = field(default_factory=dict)
