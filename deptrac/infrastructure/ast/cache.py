"""File reference caches used by the AST parser."""

import hashlib
import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from deptrac.infrastructure.ast.parser import FileReference
from deptrac.infrastructure.exceptions import CacheFileError
from deptrac.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)


def file_hash(filepath: str) -> Optional[str]:
    """SHA-1 of the file content, or None if the file cannot be read."""
    try:
        with open(filepath, "rb") as f:
            return hashlib.sha1(f.read()).hexdigest()
    except OSError:
        return None


class AstFileReferenceCache(ABC):
    """Stores parsed file references keyed by file path."""

    @abstractmethod
    def get(self, filepath: str) -> Optional[FileReference]:
        pass

    @abstractmethod
    def set(self, reference: FileReference) -> None:
        pass

    def has(self, filepath: str) -> bool:
        return self.get(filepath) is not None


class AstFileReferenceInMemoryCache(AstFileReferenceCache):
    """Cache that lives for a single run."""

    def __init__(self):
        self._references: Dict[str, FileReference] = {}

    def get(self, filepath: str) -> Optional[FileReference]:
        return self._references.get(os.path.realpath(filepath))

    def set(self, reference: FileReference) -> None:
        self._references[os.path.realpath(reference.filepath)] = reference


class AstFileReferenceFileCache(AstFileReferenceCache):
    """
    Cache persisted as JSON in the cache file.

    Layout::

        {"version": "<deptrac version>",
         "payload": {"<path>": {"hash": "<sha1>", "reference": {...}}}}

    Entries are only returned while the hash of the file on disk still
    matches. An empty or unreadable cache file, or one written by another
    version, starts an empty cache.
    """

    def __init__(self, cache_file: str, cache_version: str):
        self.cache_file = cache_file
        self.cache_version = cache_version
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._parsed: Dict[str, FileReference] = {}
        self._loaded = False

    def get(self, filepath: str) -> Optional[FileReference]:
        self.load()
        filepath = os.path.realpath(filepath)

        if filepath in self._parsed:
            return self._parsed[filepath]

        entry = self._entries.get(filepath)
        if entry is None or entry.get("hash") != file_hash(filepath):
            return None

        reference = FileReference.from_dict(entry["reference"])
        self._parsed[filepath] = reference
        return reference

    def set(self, reference: FileReference) -> None:
        self.load()
        filepath = os.path.realpath(reference.filepath)
        self._parsed[filepath] = reference
        self._entries[filepath] = {"hash": file_hash(filepath), "reference": reference.to_dict()}

    def load(self) -> None:
        """Read the cache file once; later calls are no-ops."""
        if self._loaded:
            return
        self._loaded = True

        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            logger.warning(f"Unable to read cache file {self.cache_file}: {e}")
            return

        if not content.strip():
            return

        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring invalid cache file {self.cache_file}")
            return

        if not isinstance(data, dict) or data.get("version") != self.cache_version:
            logger.info("Cache version changed, starting with an empty cache", cache_file=self.cache_file)
            return

        payload = data.get("payload")
        if isinstance(payload, dict):
            self._entries = {
                path: entry
                for path, entry in payload.items()
                if isinstance(entry, dict) and "reference" in entry
            }
        logger.debug(f"Loaded {len(self._entries)} cached file reference(s)")

    def write(self) -> None:
        """
        Persist the cache.

        Raises:
            CacheFileError: If the cache file cannot be written
        """
        if not self._loaded:
            return

        data = {"version": self.cache_version, "payload": self._entries}
        try:
            with open(self.cache_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
        except OSError as e:
            logger.error(f"Failed to write cache file {self.cache_file}: {e}")
            raise CacheFileError.not_writable(self.cache_file, str(e)) from e

        logger.debug(f"Wrote {len(self._entries)} file reference(s) to {self.cache_file}")
