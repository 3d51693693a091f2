"""Tests for YamlFileLoader."""

import pytest

from deptrac.infrastructure.di.definition import Reference
from deptrac.infrastructure.di.exceptions import FileLocatorFileNotFoundError, LoaderLoadError
from deptrac.infrastructure.di.loaders import FileLocator, LoaderResolver, PythonFileLoader, YamlFileLoader


@pytest.mark.unit
class TestYamlFileLoader:
    """Test YAML configuration loading."""

    def _loader(self, container, tmp_path):
        locator = FileLocator([str(tmp_path)])
        loader = YamlFileLoader(container, locator)
        LoaderResolver([loader, PythonFileLoader(container, locator)])
        return loader

    def test_supports_yaml_extensions(self, container, tmp_path):
        """Both ``.yaml`` and ``.yml`` are handled."""
        loader = self._loader(container, tmp_path)

        assert loader.supports("deptrac.yaml")
        assert loader.supports("deptrac.YML")
        assert not loader.supports("deptrac.py")

    def test_parameters_and_extension_sections(self, container, tmp_path, write_file):
        """Parameters are set and extension sections are stored as fragments."""
        write_file(
            "deptrac.yaml",
            """
            parameters:
              report_dir: build
            deptrac:
              paths: [src]
              cache_file: var/.deptrac.cache
            """,
        )

        self._loader(container, tmp_path).load("deptrac.yaml")

        assert container.get_parameter("report_dir") == "build"
        assert container.get_extension_config("deptrac") == [
            {"paths": ["src"], "cache_file": "var/.deptrac.cache"}
        ]

    def test_empty_file_is_accepted(self, container, tmp_path, write_file):
        """An empty document loads nothing."""
        write_file("deptrac.yaml", "")

        self._loader(container, tmp_path).load("deptrac.yaml")

        assert container.get_extension_config("deptrac") == []

    def test_services_section(self, container, tmp_path, write_file):
        """Services support class, arguments, calls, tags, aliases and escapes."""
        write_file(
            "deptrac.yaml",
            """
            services:
              transport:
                class: tests.fixtures.services.Transport
                arguments: ['@@not-a-reference']
              mailer:
                class: tests.fixtures.services.Mailer
                arguments:
                  transport: '@transport'
                calls:
                  - [add_header, [X-Tool, deptrac]]
                tags:
                  - mailer
                  - { name: console.command, command: 'mail:send' }
                public: false
              mail: '@mailer'
              tests.fixtures.services.Transport: ~
            """,
        )

        self._loader(container, tmp_path).load("deptrac.yaml")

        transport = container.get_definition("transport")
        assert transport.arguments == ["@not-a-reference"]

        mailer = container.get_definition("mailer")
        assert mailer.class_name == "tests.fixtures.services.Mailer"
        assert mailer.arguments == {"transport": Reference("transport")}
        assert mailer.calls == [("add_header", ["X-Tool", "deptrac"])]
        assert mailer.tags == {"mailer": [{}], "console.command": [{"command": "mail:send"}]}
        assert mailer.public is False

        assert container.get_aliases()["mail"] == "mailer"
        assert container.get_definition("tests.fixtures.services.Transport").class_name is None

    def test_imports_are_relative_to_importing_file(self, container, tmp_path, write_file):
        """Imported files load before the importing file's own sections."""
        write_file("config/base.yaml", "deptrac:\n  paths: [src]\n")
        write_file(
            "config/deptrac.yaml",
            """
            imports:
              - base.yaml
              - { resource: optional.yaml, ignore_errors: true }
            deptrac:
              paths: [lib]
            """,
        )

        self._loader(container, tmp_path).load("config/deptrac.yaml")

        assert container.get_extension_config("deptrac") == [{"paths": ["src"]}, {"paths": ["lib"]}]

    def test_yaml_can_import_python_files(self, container, tmp_path, write_file):
        """The resolver picks the loader of the imported file."""
        write_file(
            "extra.py",
            """
            def configure(container):
                container.parameters().set("from_python", True)
            """,
        )
        write_file("deptrac.yaml", "imports: [extra.py]\n")

        self._loader(container, tmp_path).load("deptrac.yaml")

        assert container.get_parameter("from_python") is True

    def test_circular_imports_raise(self, container, tmp_path, write_file):
        """A file importing itself indirectly is rejected."""
        write_file("a.yaml", "imports: [b.yaml]\n")
        write_file("b.yaml", "imports: [a.yaml]\n")

        with pytest.raises(LoaderLoadError, match="Circular reference"):
            self._loader(container, tmp_path).load("a.yaml")

    def test_missing_file_raises(self, container, tmp_path):
        """Unknown files are reported by the locator."""
        with pytest.raises(FileLocatorFileNotFoundError):
            self._loader(container, tmp_path).load("missing.yaml")

    @pytest.mark.parametrize(
        "content, message",
        [
            ("- just\n- a list\n", "should contain a mapping"),
            ("imports: base.yaml\n", '"imports" key should contain a list'),
            ("parameters: [a, b]\n", '"parameters" key should contain a mapping'),
            ("unknown:\n  key: value\n", "no extension able to load"),
            ("services:\n  svc: 42\n", "must be a mapping"),
            ("services:\n  svc: {klass: Foo}\n", "unsupported"),
            ("deptrac:\n  nope: true\n", "Invalid configuration"),
            ("deptrac: [unclosed\n", "valid YAML"),
        ],
    )
    def test_invalid_content_raises(self, container, tmp_path, write_file, content, message):
        """Malformed documents raise LoaderLoadError with a precise message."""
        write_file("deptrac.yaml", content)

        with pytest.raises(LoaderLoadError, match=message):
            self._loader(container, tmp_path).load("deptrac.yaml")
