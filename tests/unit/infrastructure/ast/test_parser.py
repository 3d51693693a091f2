"""Tests for PythonAstParser."""

from unittest.mock import Mock

import pytest

from deptrac.infrastructure.ast.cache import AstFileReferenceInMemoryCache
from deptrac.infrastructure.ast.parser import CouldNotParseFileError, FileReference, PythonAstParser


@pytest.mark.unit
class TestPythonAstParser:
    """Test file reference extraction."""

    def test_imports_and_declarations_are_collected(self, write_file):
        """Imports, top-level classes and functions are recorded."""
        path = write_file(
            "app/service.py",
            """
            import os
            import json as j
            from typing import List
            from . import sibling
            from ..domain import model

            class Service:
                def method(self):
                    import re

            def helper():
                pass

            async def fetch():
                pass
            """,
        )

        reference = PythonAstParser(AstFileReferenceInMemoryCache()).parse_file(path)

        assert reference.filepath == path
        assert reference.imports == ["os", "json", "typing", ".", "..domain", "re"]
        assert reference.classes == ["Service"]
        assert reference.functions == ["helper", "fetch"]

    def test_cached_reference_is_returned(self, write_file):
        """The cache is consulted before parsing."""
        path = write_file("module.py", "import os\n")
        cached = FileReference(path, imports=["cached"])
        cache = Mock()
        cache.get.return_value = cached

        assert PythonAstParser(cache).parse_file(path) is cached
        cache.set.assert_not_called()

    def test_parsed_reference_is_stored(self, write_file):
        """Fresh results are written to the cache."""
        path = write_file("module.py", "import os\n")
        cache = AstFileReferenceInMemoryCache()

        reference = PythonAstParser(cache).parse_file(path)

        assert cache.get(path) is reference

    def test_syntax_error_raises(self, write_file):
        """Invalid source is reported with the file path."""
        path = write_file("broken.py", "def broken(:\n")

        with pytest.raises(CouldNotParseFileError) as exc_info:
            PythonAstParser(AstFileReferenceInMemoryCache()).parse_file(path)

        assert exc_info.value.filepath == path

    def test_missing_file_raises(self, tmp_path):
        """Unreadable files are reported as parse errors."""
        with pytest.raises(CouldNotParseFileError):
            PythonAstParser(AstFileReferenceInMemoryCache()).parse_file(str(tmp_path / "missing.py"))

    def test_reference_dict_conversion(self):
        """References survive conversion to plain data."""
        reference = FileReference("/src/a.py", ["os"], ["A"], ["f"])

        assert FileReference.from_dict(reference.to_dict()) == reference
