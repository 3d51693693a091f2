"""Configuration file loaders."""

from .base import DelegatingLoader, FileLoader, LoaderResolver
from .locator import FileLocator
from .python_loader import ContainerConfigurator, PythonFileLoader, env, param, service
from .yaml_loader import YamlFileLoader

__all__ = [
    "ContainerConfigurator",
    "DelegatingLoader",
    "FileLoader",
    "FileLocator",
    "LoaderResolver",
    "PythonFileLoader",
    "YamlFileLoader",
    "env",
    "param",
    "service",
]
