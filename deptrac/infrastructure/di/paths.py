"""Textual path normalisation against a working directory."""

import os


class PathResolver:
    """Turns possibly relative paths into absolute ones without touching the filesystem."""

    @staticmethod
    def is_relative(path: str) -> bool:
        return not os.path.isabs(path)

    def resolve(self, path: str, working_directory: str) -> str:
        """
        Resolve ``path`` against ``working_directory``.

        Absolute paths are returned unchanged. Relative paths are joined onto
        the working directory and normalised (``.``, ``..``, separators).
        Nothing is checked on disk; validating existence is up to the caller.

        Args:
            path: Absolute or relative path
            working_directory: Absolute directory relative paths are based on

        Returns:
            Absolute path
        """
        path = os.fspath(path)
        if not self.is_relative(path):
            return path
        return os.path.normpath(os.path.join(os.fspath(working_directory), path))
