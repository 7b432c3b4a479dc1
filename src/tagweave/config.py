"""Tag configuration: delimiters, markers, and generated-code names."""

from __future__ import annotations

import keyword
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from tagweave.errors import ConfigError

# Values accepted in a mapping as "no marker: this kind is the default"
_DEFAULT_SENTINELS = ("", "\0")

_MARKER_FIELDS = ("interpolate", "execution", "single_whitespace", "multiple_whitespace")


@dataclass(frozen=True, slots=True)
class TagConfig:
    """Immutable tag configuration.

    A command marker set to ``None`` makes that command kind the default for
    directives that carry no marker character.
    """

    opening_tag: str = "<%"
    closing_tag: str = "%>"
    interpolate: str | None = None
    execution: str | None = "*"
    single_whitespace: str = "-"
    multiple_whitespace: str = "_"
    accumulator: str = "tR"
    context_name: str = "tp"

    def __post_init__(self) -> None:
        if not self.opening_tag or not self.closing_tag:
            raise ConfigError("opening and closing tags must be non-empty")
        if self.opening_tag == self.closing_tag:
            raise ConfigError(f"opening and closing tags must differ: {self.opening_tag!r}")
        from tagweave.generator import RESERVED_NAMES

        seen: dict[str, str] = {}
        for name in _MARKER_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if len(value) != 1:
                raise ConfigError(f"{name} marker must be a single character, got {value!r}")
            if value in seen:
                raise ConfigError(
                    f"{name} and {seen[value]} markers must differ, both are {value!r}"
                )
            seen[value] = name
        for name in ("accumulator", "context_name"):
            value = getattr(self, name)
            if not value.isidentifier() or keyword.iskeyword(value):
                raise ConfigError(f"{name} must be a valid identifier, got {value!r}")
            if value in RESERVED_NAMES:
                raise ConfigError(f"{name} {value!r} is reserved by the generated code")
        if self.accumulator == self.context_name:
            raise ConfigError("accumulator and context_name must differ")

    @property
    def default_kind_count(self) -> int:
        return (self.interpolate is None) + (self.execution is None)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> TagConfig:
        """Build a config from a plain mapping such as a TOML ``[tags]`` table."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if key in ("interpolate", "execution") and (
                value is None or value in _DEFAULT_SENTINELS
            ):
                kwargs[key] = None
            else:
                kwargs[key] = str(value)
        return cls(**kwargs)


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "tagweave.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def tags_from_config(config: dict[str, Any]) -> TagConfig:
    """Build the TagConfig described by a loaded config's ``[tags]`` table."""
    tags = config.get("tags")
    if tags is None:
        return TagConfig()
    if not isinstance(tags, dict):
        raise ConfigError("[tags] must be a table")
    return TagConfig.from_mapping(tags)
