"""Loads the user configuration file into the container."""

import os
from typing import TYPE_CHECKING

from deptrac.infrastructure.di.loaders import (
    DelegatingLoader,
    FileLocator,
    LoaderResolver,
    PythonFileLoader,
    YamlFileLoader,
)
from deptrac.infrastructure.exceptions import CannotLoadConfigurationError
from deptrac.infrastructure.logging.logger import get_logger

if TYPE_CHECKING:
    from deptrac.infrastructure.di.container import DIContainer

logger = get_logger(__name__)


class ConfigurationLoader:
    """Selects a YAML or Python loader by file extension and loads the user configuration."""

    def load(self, container: "DIContainer", config_file: str) -> None:
        """
        Load ``config_file`` into ``container``.

        Sets the ``projectDirectory`` parameter to the directory holding the
        file so relative references inside it resolve from there.

        Args:
            container: Container being assembled
            config_file: Absolute path of the configuration file

        Raises:
            CannotLoadConfigurationError: If the file cannot be found, parsed or registered
        """
        config_file = os.fspath(config_file)
        directory, file_name = os.path.split(config_file)
        if not file_name or not directory:
            raise CannotLoadConfigurationError.from_config(
                file_name or config_file, "Unable to load config: Invalid or missing path."
            )

        container.set_parameter("projectDirectory", directory)

        locator = FileLocator([directory])
        loader = DelegatingLoader(
            LoaderResolver(
                [
                    YamlFileLoader(container, locator),
                    PythonFileLoader(container, locator),
                ]
            )
        )

        logger.debug("Loading configuration", config_file=config_file)
        try:
            loader.load(file_name)
        except Exception as e:
            logger.error(f"Failed to load configuration {config_file}: {e}")
            raise CannotLoadConfigurationError.from_config(file_name, str(e)) from e
