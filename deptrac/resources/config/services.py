"""Built-in services, loaded before any user configuration."""

from deptrac._package import VERSION
from deptrac.infrastructure.di.loaders.python_loader import param, service

CACHE = "deptrac.infrastructure.ast.cache.AstFileReferenceCache"
IN_MEMORY_CACHE = "deptrac.infrastructure.ast.cache.AstFileReferenceInMemoryCache"
PARSER = "deptrac.infrastructure.ast.parser.PythonAstParser"
EXTRACTOR = "deptrac.infrastructure.ast.extractor.AstMapExtractor"

CONFIG_PARAMETERS = (
    "paths",
    "exclude_files",
    "layers",
    "ruleset",
    "skip_violations",
    "analyser",
    "formatters",
    "ignore_uncovered_internal_classes",
)


def configure(container):
    container.parameters().set("deptrac.version", VERSION)

    services = container.services()

    services.set("event_dispatcher", "deptrac.infrastructure.event.dispatcher.EventDispatcher")

    services.set(IN_MEMORY_CACHE)
    services.alias(CACHE, IN_MEMORY_CACHE)

    services.set(PARSER).args(service(CACHE))
    services.set(EXTRACTOR).args(service(PARSER), service("event_dispatcher"))

    services.set("deptrac.interface.commands.DebugConfigCommand").args(
        config={name: param(name) for name in CONFIG_PARAMETERS}
    ).tag("console.command", command="debug:config")
