"""deptrac - service container assembly.

This package builds the service container used by the deptrac dependency
analysis tool. The container is composed from three layered sources:

    - built-in service definitions shipped in ``deptrac/resources/config``
    - a user supplied configuration file (YAML or Python)
    - the AST reference cache file persisted between runs

Key Components:
    - config: pydantic schemas for the ``deptrac`` section and logging
    - infrastructure.di: registry, loaders, compiler passes and the assembler
    - infrastructure.ast: AST parsing and the cache artifact services
    - infrastructure.event: event dispatcher wired by compiler passes
    - interface: console command registry

Usage:
    >>> from deptrac import ContainerAssembler
    >>> container = ContainerAssembler("/project").with_config("deptrac.yaml").build()
    >>> container.get_parameter("cache_file")
    '/project/.deptrac.cache'
"""

from ._package import PACKAGE_NAME, __version__
from .infrastructure.di.assembler import ContainerAssembler
from .infrastructure.di.cache_policy import CacheDecision, CacheOverride
from .infrastructure.exceptions import CacheFileError, CannotLoadConfigurationError

__package_name__ = PACKAGE_NAME

__all__ = [
    "__version__",
    "ContainerAssembler",
    "CacheDecision",
    "CacheOverride",
    "CacheFileError",
    "CannotLoadConfigurationError",
]
