"""Tests for DIContainer."""

import pytest

from deptrac.infrastructure.di.compiler_passes import CompilerPass
from deptrac.infrastructure.di.container import DIContainer
from deptrac.infrastructure.di.definition import Reference, ServiceDefinition
from deptrac.infrastructure.di.exceptions import (
    CircularReferenceError,
    DependencyInjectionError,
    ExtensionNotFoundError,
    FrozenContainerError,
    InvalidArgumentError,
    ParameterNotFoundError,
    ServiceInstantiationError,
    ServiceNotFoundError,
)

TRANSPORT = "tests.fixtures.services.Transport"
MAILER = "tests.fixtures.services.Mailer"
GREETER = "tests.fixtures.services.Greeter"


@pytest.mark.unit
class TestContainerParameters:
    """Test parameters and placeholder resolution."""

    def test_parameter_roundtrip(self):
        """Parameters can be read back before compilation."""
        container = DIContainer()
        container.set_parameter("report_dir", "build")

        assert container.has_parameter("report_dir")
        assert container.get_parameter("report_dir") == "build"

    def test_missing_parameter_raises(self):
        """Unknown parameters raise ParameterNotFoundError."""
        with pytest.raises(ParameterNotFoundError):
            DIContainer().get_parameter("missing")

    def test_placeholders_are_resolved_on_compile(self):
        """Embedded and whole-value placeholders are substituted."""
        container = DIContainer()
        container.set_parameter("root", "/project")
        container.set_parameter("src", "%root%/src")
        container.set_parameter("paths", ["%src%", "%root%/tests"])
        container.set_parameter("copy", "%paths%")

        container.compile()

        assert container.get_parameter("src") == "/project/src"
        assert container.get_parameter("paths") == ["/project/src", "/project/tests"]
        assert container.get_parameter("copy") == ["/project/src", "/project/tests"]

    def test_double_percent_escapes(self):
        """``%%`` yields a literal percent sign."""
        container = DIContainer()
        container.set_parameter("ratio", "100%%")

        container.compile()

        assert container.get_parameter("ratio") == "100%"

    def test_env_placeholder_reads_environment(self, monkeypatch):
        """``%env(NAME)%`` reads the process environment."""
        monkeypatch.setenv("DEPTRAC_TEST_DIR", "/tmp/deptrac")
        container = DIContainer()
        container.set_parameter("dir", "%env(DEPTRAC_TEST_DIR)%")

        container.compile()

        assert container.get_parameter("dir") == "/tmp/deptrac"

    def test_missing_env_variable_raises(self, monkeypatch):
        """Undefined environment variables are reported as missing parameters."""
        monkeypatch.delenv("DEPTRAC_UNDEFINED", raising=False)
        container = DIContainer()
        container.set_parameter("dir", "%env(DEPTRAC_UNDEFINED)%")

        with pytest.raises(ParameterNotFoundError):
            container.compile()

    def test_unknown_placeholder_raises(self):
        """A placeholder naming no parameter fails compilation."""
        container = DIContainer()
        container.set_parameter("dir", "%unknown%/src")

        with pytest.raises(ParameterNotFoundError):
            container.compile()

    def test_circular_parameters_raise(self):
        """Parameters referencing each other are rejected."""
        container = DIContainer()
        container.set_parameter("a", "%b%")
        container.set_parameter("b", "%a%")

        with pytest.raises(InvalidArgumentError, match="Circular reference"):
            container.compile()

    def test_list_parameter_cannot_be_embedded_in_string(self):
        """Only scalars may be interpolated into a string."""
        container = DIContainer()
        container.set_parameter("paths", ["src"])
        container.set_parameter("joined", "paths: %paths%")

        with pytest.raises(InvalidArgumentError):
            container.compile()


@pytest.mark.unit
class TestContainerDefinitions:
    """Test definitions, aliases and tags."""

    def test_register_uses_service_id_as_class(self):
        """The id doubles as the class path."""
        container = DIContainer()
        definition = container.register(TRANSPORT)

        assert definition.get_class(TRANSPORT) == TRANSPORT

    def test_alias_resolves_to_definition(self):
        """Aliases point at definitions."""
        container = DIContainer()
        container.register(TRANSPORT)
        container.set_alias("transport", TRANSPORT)

        assert container.has_alias("transport")
        assert container.has_definition("transport")
        assert container.get_definition("transport") is container.get_definition(TRANSPORT)

    def test_alias_to_itself_is_rejected(self):
        """An alias cannot reference itself."""
        with pytest.raises(InvalidArgumentError):
            DIContainer().set_alias("transport", "transport")

    def test_definition_replaces_alias(self):
        """Setting a definition drops an alias with the same id."""
        container = DIContainer()
        container.register(TRANSPORT)
        container.set_alias("transport", TRANSPORT)

        container.set_definition("transport", ServiceDefinition(class_name=TRANSPORT))

        assert not container.has_alias("transport")

    def test_remove_definition(self):
        """Removed definitions are no longer known."""
        container = DIContainer()
        container.register(TRANSPORT)

        assert container.remove_definition(TRANSPORT) is True
        assert container.remove_definition(TRANSPORT) is False
        assert not container.has_definition(TRANSPORT)

    def test_find_tagged_service_ids(self):
        """Tags are returned with their attributes."""
        container = DIContainer()
        container.register(TRANSPORT).add_tag("transport", priority=10)
        container.register(MAILER)

        assert container.find_tagged_service_ids("transport") == {TRANSPORT: [{"priority": 10}]}

    def test_get_definition_of_unknown_service_raises(self):
        """Unknown ids raise ServiceNotFoundError."""
        with pytest.raises(ServiceNotFoundError):
            DIContainer().get_definition("missing")


@pytest.mark.unit
class TestContainerExtensions:
    """Test extension configuration handling."""

    def test_unknown_extension_is_rejected(self):
        """Fragments need a registered extension."""
        with pytest.raises(ExtensionNotFoundError):
            DIContainer().load_from_extension("unknown", {})

    def test_fragments_are_kept_in_load_order(self, container):
        """Every fragment is stored, oldest first."""
        container.load_from_extension("deptrac", {"paths": ["src"]})
        container.load_from_extension("deptrac", None)

        assert container.get_extension_config("deptrac") == [{"paths": ["src"]}, {}]

    def test_invalid_fragment_is_rejected_immediately(self, container):
        """Schema errors surface when the fragment is loaded."""
        with pytest.raises(InvalidArgumentError, match="deptrac"):
            container.load_from_extension("deptrac", {"unknown_key": True})

    def test_extension_loads_without_fragments(self, container):
        """Defaults become parameters even when nothing was configured."""
        container.compile()

        assert container.get_parameter("paths") == []
        assert container.get_parameter("analyser") == {"types": ["class", "function"]}
        assert not container.has_parameter("cache_file")


@pytest.mark.unit
class TestContainerCompilation:
    """Test compilation and service instantiation."""

    def test_compiler_passes_run_in_order(self):
        """Passes run once, in registration order."""
        calls = []

        class RecordingPass(CompilerPass):
            def __init__(self, name):
                self.name = name

            def process(self, container):
                calls.append(self.name)

        container = DIContainer()
        container.add_compiler_pass(RecordingPass("first"))
        container.add_compiler_pass(RecordingPass("second"))

        container.compile()

        assert calls == ["first", "second"]

    def test_compiled_container_is_frozen(self):
        """Mutating a compiled container raises."""
        container = DIContainer()
        container.compile()

        assert container.is_compiled
        with pytest.raises(FrozenContainerError):
            container.set_parameter("late", True)
        with pytest.raises(FrozenContainerError):
            container.compile()

    def test_services_require_compiled_container(self):
        """Services are only handed out after compile()."""
        container = DIContainer()
        container.register(TRANSPORT)

        with pytest.raises(DependencyInjectionError):
            container.get(TRANSPORT)

    def test_get_creates_service_with_resolved_arguments(self):
        """References and placeholders are resolved when the service is built."""
        container = DIContainer()
        container.set_parameter("sender", "deptrac@example.com")
        container.register(TRANSPORT).set_argument("dsn", "smtp://localhost")
        container.register(MAILER).set_argument(0, Reference(TRANSPORT)).set_argument(1, "%sender%")
        container.compile()

        mailer = container.get(MAILER)

        assert mailer.sender == "deptrac@example.com"
        assert mailer.transport.dsn == "smtp://localhost"

    def test_shared_services_are_reused(self):
        """Shared services are created once."""
        container = DIContainer()
        container.register(TRANSPORT)
        container.register("fresh", TRANSPORT).shared = False
        container.compile()

        assert container.get(TRANSPORT) is container.get(TRANSPORT)
        assert container.get("fresh") is not container.get("fresh")

    def test_method_calls_are_applied(self):
        """Calls run after construction."""
        container = DIContainer()
        container.register(TRANSPORT)
        container.register(MAILER, MAILER).set_argument(0, Reference(TRANSPORT)).add_method_call(
            "add_header", ["X-Tool", "deptrac"]
        )
        container.compile()

        assert container.get(MAILER).headers == {"X-Tool": "deptrac"}

    def test_private_service_is_reachable_through_alias_only(self):
        """Private services cannot be fetched by id."""
        container = DIContainer()
        container.register(TRANSPORT).public = False
        container.set_alias("transport", TRANSPORT)
        container.compile()

        assert container.get("transport").dsn == "memory://"
        with pytest.raises(ServiceNotFoundError):
            container.get(TRANSPORT)

    def test_get_optional_returns_none_for_unknown(self):
        """Unknown services yield None."""
        container = DIContainer()
        container.compile()

        assert container.get_optional("missing") is None

    def test_missing_reference_fails_compilation(self):
        """References to unknown services are reported at compile time."""
        container = DIContainer()
        container.register(MAILER).set_argument(0, Reference("missing"))

        with pytest.raises(ServiceNotFoundError, match="missing"):
            container.compile()

    def test_alias_to_unknown_service_fails_compilation(self):
        """Dangling aliases are reported at compile time."""
        container = DIContainer()
        container.set_alias("transport", "missing")

        with pytest.raises(ServiceNotFoundError):
            container.compile()

    def test_circular_service_reference_raises(self):
        """Services depending on themselves are detected."""
        container = DIContainer()
        container.register("a", "tests.fixtures.services.SelfReferencing").set_argument(0, Reference("b"))
        container.register("b", "tests.fixtures.services.SelfReferencing").set_argument(0, Reference("a"))
        container.compile()

        with pytest.raises(CircularReferenceError):
            container.get("a")

    def test_unimportable_class_raises(self):
        """Bad class paths surface as ServiceInstantiationError."""
        container = DIContainer()
        container.register("broken", "tests.fixtures.missing_module.Nothing")
        container.compile()

        with pytest.raises(ServiceInstantiationError, match="cannot import module"):
            container.get("broken")

    def test_constructor_failure_raises(self):
        """Exceptions from constructors are wrapped."""
        container = DIContainer()
        container.register("tests.fixtures.services.Exploding")
        container.compile()

        with pytest.raises(ServiceInstantiationError, match="boom"):
            container.get("tests.fixtures.services.Exploding")

    def test_colon_class_path_is_supported(self):
        """``module:Class`` paths are accepted."""
        container = DIContainer()
        container.register("greeter", "tests.fixtures.services:Greeter").set_argument("greeting", "Hello")
        container.compile()

        assert container.get("greeter").greet("deptrac") == "Hello deptrac!"

    def test_registered_instance_is_returned(self):
        """Pre-created instances bypass definitions."""
        container = DIContainer()
        instance = object()
        container.register_instance("clock", instance)
        container.compile()

        assert container.get("clock") is instance
