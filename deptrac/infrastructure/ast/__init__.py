"""AST parsing with a reusable file reference cache."""

from .cache import AstFileReferenceCache, AstFileReferenceFileCache, AstFileReferenceInMemoryCache
from .events import PostCreateAstMapEvent, PreCreateAstMapEvent
from .extractor import AstMapExtractor
from .parser import CouldNotParseFileError, FileReference, PythonAstParser
from .subscriber import CacheableFileSubscriber

__all__ = [
    "AstFileReferenceCache",
    "AstFileReferenceFileCache",
    "AstFileReferenceInMemoryCache",
    "AstMapExtractor",
    "CacheableFileSubscriber",
    "CouldNotParseFileError",
    "FileReference",
    "PostCreateAstMapEvent",
    "PreCreateAstMapEvent",
    "PythonAstParser",
]
