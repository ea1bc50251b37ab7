"""
Compiler configuration.

The conventional names the compiler looks for (entry-point declarations,
declaration suffix, builder namespace) are plain settings so that sources
generated with other conventions can still be compiled.

Usage:
    ```python
    from layout_schema.config import CompilerConfig, load_config

    config = CompilerConfig(entry_names=["Schema", "CardSchema"])
    config = load_config(Path("layout-schema.json"))
    ```
"""

import json
import re
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, field_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

DEFAULT_ENTRY_NAMES = ["Schema", "slideSchema", "SlideSchema"]


class CompilerConfig(BaseModel):
    """
    Settings for declaration discovery and compilation.

    Attributes:
        entry_names: Entry-point declaration names, highest priority first
        name_suffix: Suffix a declaration name must end with to be collected
        builder_namespace: Identifier builder chains start with (``z`` in ``z.object``)
        container_hint: Substring (case-insensitive) marking a likely entry point
        max_depth: Ceiling on nested compilation depth
    """

    entry_names: List[str] = Field(default_factory=lambda: list(DEFAULT_ENTRY_NAMES))
    name_suffix: str = "Schema"
    builder_namespace: str = "z"
    container_hint: str = "slide"
    max_depth: int = Field(default=32, ge=1)

    @field_validator("entry_names")
    @classmethod
    def _check_entry_names(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("entry_names must not be empty")
        for name in value:
            if not _IDENTIFIER.match(name):
                raise ValueError(f"Invalid entry name: {name!r}")
        return value

    @field_validator("name_suffix", "builder_namespace")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"Invalid identifier: {value!r}")
        return value


def load_config(config_path: Path) -> CompilerConfig:
    """
    Load a CompilerConfig from a JSON file.

    Args:
        config_path: Path to a JSON object with CompilerConfig fields

    Returns:
        CompilerConfig: Validated configuration

    Raises:
        ValueError: If the file is missing, not JSON, or fails validation
    """
    if not config_path.exists():
        raise ValueError(f"Config file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    # pydantic.ValidationError is a ValueError subclass
    return CompilerConfig.model_validate(data)
