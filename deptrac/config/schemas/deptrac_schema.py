"""Schema of the ``deptrac`` configuration section."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmitterType(str, Enum):
    """Dependency emitters the analyser can run."""

    CLASS = "class"
    CLASS_SUPERGLOBAL = "class_superglobal"
    FILE = "file"
    FUNCTION = "function"
    FUNCTION_CALL = "function_call"
    FUNCTION_SUPERGLOBAL = "function_superglobal"
    USE = "use"


class AnalyserConfig(BaseModel):
    """Analyser configuration."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True, validate_default=True)

    types: List[EmitterType] = Field(
        default_factory=lambda: [EmitterType.CLASS, EmitterType.FUNCTION],
        description="Emitter types used to collect dependencies",
    )

    @field_validator("types")
    @classmethod
    def validate_types(cls, v: List[EmitterType]) -> List[EmitterType]:
        """Reject an empty or duplicated emitter list."""
        if not v:
            raise ValueError("At least one emitter type is required")
        if len(set(v)) != len(v):
            raise ValueError("Emitter types must be unique")
        return v


class DeptracConfig(BaseModel):
    """Configuration consumed by DeptracExtension."""

    model_config = ConfigDict(extra="forbid")

    paths: List[str] = Field(default_factory=list, description="Paths to analyse")
    exclude_files: List[str] = Field(default_factory=list, description="Regex patterns of excluded files")
    layers: List[Dict[str, Any]] = Field(default_factory=list, description="Layer definitions")
    ruleset: Dict[str, List[str]] = Field(default_factory=dict, description="Allowed layer dependencies")
    skip_violations: Dict[str, List[str]] = Field(
        default_factory=dict, description="Violations to ignore per token"
    )
    analyser: AnalyserConfig = Field(default_factory=AnalyserConfig)
    formatters: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="Output formatter options")
    ignore_uncovered_internal_classes: bool = Field(
        True, description="Do not report uncovered builtin classes"
    )
    cache_file: Optional[str] = Field(None, description="Location of the AST cache file")

    @field_validator("layers")
    @classmethod
    def validate_layers(cls, v: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Every layer needs a name."""
        for index, layer in enumerate(v):
            if not layer.get("name"):
                raise ValueError(f"Layer at position {index} has no name")
        return v

    @field_validator("cache_file")
    @classmethod
    def validate_cache_file(cls, v: Optional[str]) -> Optional[str]:
        """An empty path is an error, ``~`` means unset."""
        if v is not None and not v.strip():
            raise ValueError("cache_file must not be empty")
        return v

    @field_validator("ruleset", "skip_violations", mode="before")
    @classmethod
    def replace_null_lists(cls, v: Any) -> Any:
        """Allow ``Layer: ~`` in YAML as an empty dependency list."""
        if isinstance(v, dict):
            return {key: [] if value is None else value for key, value in v.items()}
        return v

    def to_parameters(self) -> Dict[str, Any]:
        """Container parameters derived from this configuration."""
        return {
            "paths": list(self.paths),
            "exclude_files": list(self.exclude_files),
            "layers": [dict(layer) for layer in self.layers],
            "ruleset": {key: list(value) for key, value in self.ruleset.items()},
            "skip_violations": {key: list(value) for key, value in self.skip_violations.items()},
            "analyser": self.analyser.model_dump(mode="json"),
            "formatters": dict(self.formatters),
            "ignore_uncovered_internal_classes": self.ignore_uncovered_internal_classes,
        }


def validate_deptrac_config(config: Dict[str, Any]) -> DeptracConfig:
    """
    Validate a ``deptrac`` configuration section.

    Args:
        config: Raw configuration mapping

    Returns:
        Validated configuration

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    return DeptracConfig.model_validate(config)
