"""Console commands."""

import sys
from typing import Any, Dict, Optional, TextIO

import yaml

from deptrac._package import EXTENSION_ALIAS


class DebugConfigCommand:
    """Prints the resolved ``deptrac`` configuration as YAML."""

    name = "debug:config"
    description = "Dumps the configuration resolved from all loaded files"

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    def render(self) -> str:
        return yaml.safe_dump({EXTENSION_ALIAS: self.config}, default_flow_style=False, sort_keys=False)

    def execute(self, output: Optional[TextIO] = None) -> int:
        """Write the configuration to ``output`` (stdout by default) and return the exit code."""
        (output or sys.stdout).write(self.render())
        return 0
