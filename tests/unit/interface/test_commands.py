"""Tests for the console command registry and commands."""

import io

import pytest
import yaml

from deptrac.interface.command_loader import CommandLoader, CommandNotFoundError
from deptrac.interface.commands import DebugConfigCommand


@pytest.mark.unit
class TestCommandLoader:
    """Test command lookup."""

    def test_lookup(self):
        """Commands are found by name."""
        command = object()
        loader = CommandLoader({"debug:config": command, "analyse": object()})

        assert loader.has("debug:config")
        assert loader.get("debug:config") is command
        assert loader.names() == ["analyse", "debug:config"]

    def test_unknown_command_lists_available_commands(self):
        """The error names the registered commands."""
        loader = CommandLoader({"debug:config": object()})

        with pytest.raises(CommandNotFoundError, match="debug:config"):
            loader.get("analyse")


@pytest.mark.unit
class TestDebugConfigCommand:
    """Test the configuration dump."""

    def test_execute_writes_yaml(self):
        """The configuration is printed under the ``deptrac`` key."""
        output = io.StringIO()
        command = DebugConfigCommand({"paths": ["src"], "analyser": {"types": ["class"]}})

        assert command.execute(output) == 0
        assert yaml.safe_load(output.getvalue()) == {
            "deptrac": {"paths": ["src"], "analyser": {"types": ["class"]}}
        }
