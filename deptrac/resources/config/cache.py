"""Persistent AST cache, loaded only when caching is enabled."""

from deptrac.infrastructure.di.loaders.python_loader import param, service

CACHE = "deptrac.infrastructure.ast.cache.AstFileReferenceCache"
FILE_CACHE = "deptrac.infrastructure.ast.cache.AstFileReferenceFileCache"


def configure(container):
    services = container.services()

    services.set(FILE_CACHE).args(param("cache_file"), param("deptrac.version"))
    services.alias(CACHE, FILE_CACHE)

    services.set("deptrac.infrastructure.ast.subscriber.CacheableFileSubscriber").args(
        service(FILE_CACHE)
    ).tag("event_subscriber")
