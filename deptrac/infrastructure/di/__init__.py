"""Dependency Injection package."""
from .assembler import ContainerAssembler
from .cache_policy import CacheDecision, CacheLocationPolicy, CacheOverride
from .container import DIContainer
from .definition import Reference, ServiceDefinition
from .extension import DeptracExtension, Extension
from .paths import PathResolver

__all__ = [
    "CacheDecision",
    "CacheLocationPolicy",
    "CacheOverride",
    "ContainerAssembler",
    "DIContainer",
    "DeptracExtension",
    "Extension",
    "PathResolver",
    "Reference",
    "ServiceDefinition",
]
