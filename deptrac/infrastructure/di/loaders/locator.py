"""Locate configuration files in a list of directories."""

import os
from typing import Iterable, List, Optional

from deptrac.infrastructure.di.exceptions import FileLocatorFileNotFoundError


class FileLocator:
    """Finds files by name, relative to the current file or to configured directories."""

    def __init__(self, paths: Optional[Iterable[str]] = None):
        self.paths: List[str] = [str(path) for path in (paths or [])]

    def locate(self, name: str, current_path: Optional[str] = None) -> str:
        """
        Return the absolute path of the first matching file.

        Args:
            name: File name, relative or absolute
            current_path: Directory searched before the configured paths

        Raises:
            FileLocatorFileNotFoundError: If no candidate exists
        """
        if not name:
            raise FileLocatorFileNotFoundError(name, [])

        if os.path.isabs(name):
            if os.path.exists(name):
                return name
            raise FileLocatorFileNotFoundError(name, [])

        directories = ([str(current_path)] if current_path else []) + self.paths
        for directory in directories:
            candidate = os.path.normpath(os.path.join(directory, name))
            if os.path.exists(candidate):
                return candidate

        raise FileLocatorFileNotFoundError(name, directories)
