"""Configuration extensions contributing schema-validated sections to the container."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List

from pydantic import ValidationError

from deptrac._package import EXTENSION_ALIAS
from deptrac.config.schemas.deptrac_schema import DeptracConfig, validate_deptrac_config
from deptrac.infrastructure.di.exceptions import InvalidArgumentError
from deptrac.infrastructure.logging.logger import get_logger

if TYPE_CHECKING:
    from deptrac.infrastructure.di.container import DIContainer

logger = get_logger(__name__)


class Extension(ABC):
    """A named configuration namespace handled by the container."""

    @property
    @abstractmethod
    def alias(self) -> str:
        """Top-level configuration key this extension handles."""

    @abstractmethod
    def validate(self, config: Dict[str, Any]) -> None:
        """
        Validate a single configuration fragment.

        Raises:
            InvalidArgumentError: If the fragment does not match the schema
        """

    @abstractmethod
    def load(self, configs: List[Dict[str, Any]], container: "DIContainer") -> None:
        """Turn every loaded fragment into container parameters or definitions."""


def format_validation_error(alias: str, error: ValidationError) -> str:
    """Render pydantic errors as ``alias.path: message`` lines."""
    lines = []
    for item in error.errors():
        location = ".".join(str(part) for part in (alias,) + tuple(item["loc"]))
        lines.append(f"{location}: {item['msg']}")
    return "; ".join(lines)


class DeptracExtension(Extension):
    """Handles the ``deptrac`` configuration section."""

    @property
    def alias(self) -> str:
        return EXTENSION_ALIAS

    def validate(self, config: Dict[str, Any]) -> None:
        try:
            validate_deptrac_config(config)
        except ValidationError as e:
            raise InvalidArgumentError(
                f'Invalid configuration for path "{self.alias}": {format_validation_error(self.alias, e)}'
            ) from e

    def merge(self, configs: List[Dict[str, Any]]) -> DeptracConfig:
        """Merge fragments in load order; later top-level keys win."""
        merged: Dict[str, Any] = {}
        for fragment in configs:
            merged.update(fragment)
        try:
            return validate_deptrac_config(merged)
        except ValidationError as e:
            raise InvalidArgumentError(
                f'Invalid configuration for path "{self.alias}": {format_validation_error(self.alias, e)}'
            ) from e

    def load(self, configs: List[Dict[str, Any]], container: "DIContainer") -> None:
        config = self.merge(configs)
        for name, value in config.to_parameters().items():
            container.set_parameter(name, value)
        logger.debug(f"Loaded {self.alias} extension from {len(configs)} fragment(s)")
